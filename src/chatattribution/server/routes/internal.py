"""Internal routes for revenue reporting."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query

from chatattribution.engine.reporting import summarize_conversation
from chatattribution.server.database import Stores
from chatattribution.server.models import ConversationAttribution, ConversionRecord

router = APIRouter(tags=["internal"])


@router.get("/agents/{agent_id}/conversions")
async def list_conversions(
    agent_id: str,
    stores: Stores,
    since: Annotated[datetime | None, Query(description="Filter by recorded_at >= since")] = None,
    until: Annotated[datetime | None, Query(description="Filter by recorded_at <= until")] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[ConversionRecord]:
    """List an agent's conversion records for revenue reports."""
    return await stores.conversions.list_conversions(
        agent_id,
        since=since,
        until=until,
        limit=limit,
        offset=offset,
    )


@router.get("/agents/{agent_id}/conversations/{conversation_id}/attribution")
async def get_conversation_attribution(
    agent_id: str,
    conversation_id: str,
    stores: Stores,
) -> ConversationAttribution:
    """Get the conversions a conversation was credited with, and their summary."""
    records = await stores.conversions.find_conversions_for_conversation(
        agent_id, conversation_id
    )
    return ConversationAttribution(
        conversation_id=conversation_id,
        conversions=records,
        summary=summarize_conversation(conversation_id, records),
    )
