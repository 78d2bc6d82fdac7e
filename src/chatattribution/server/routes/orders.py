"""Order routes - attribute incoming orders to conversations."""

import logging
from typing import Annotated

from fastapi import APIRouter, Body, HTTPException
from pydantic import ValidationError

from chatattribution.engine.engine import AttributionEngine, record_conversion
from chatattribution.engine.shopify import parse_order
from chatattribution.server.database import Stores
from chatattribution.server.models import (
    AttributeRequest,
    AttributionResponse,
    OrderAnalysis,
    OrderEvent,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])


@router.post("/agents/{agent_id}/orders")
async def receive_order(
    agent_id: str,
    payload: Annotated[dict, Body()],
    stores: Stores,
) -> AttributionResponse:
    """Attribute a verified Shopify order webhook payload.

    Accepts both the REST ``orders/create`` body and a GraphQL order node.
    Unattributed orders are acknowledged like attributed ones.
    """
    try:
        order = parse_order(payload)
    except ValidationError as e:
        logger.warning("Rejected order payload for agent %s: %s", agent_id, e)
        detail = e.errors(include_url=False, include_context=False, include_input=False)
        raise HTTPException(422, detail) from e

    return await _attribute(stores, agent_id, order)


@router.post("/attribute")
async def attribute_order(
    data: AttributeRequest,
    stores: Stores,
) -> AttributionResponse:
    """Attribute an already-normalised order."""
    return await _attribute(stores, data.agent_id, data.order)


async def _attribute(stores: Stores, agent_id: str, order: OrderEvent) -> AttributionResponse:
    engine = AttributionEngine(stores.leads, stores.conversations)
    result = await engine.attribute(order, agent_id)
    record = await record_conversion(stores.conversions, agent_id, order, result)
    return AttributionResponse(
        order_id=order.order_id,
        attribution=result,
        recorded=record is not None,
        order_analysis=OrderAnalysis.for_order(order),
    )
