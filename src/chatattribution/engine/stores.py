"""Storage interfaces the attribution engine reads from and writes to.

Implementations live with the service that owns the datastore; the engine
only depends on these protocols. Store errors are expected to propagate.
"""

from datetime import datetime
from typing import Protocol

from chatattribution.engine.schema import Conversation, ConversionRecord, Lead, Message


class LeadStore(Protocol):
    """Read access to captured leads."""

    async def find_leads(self, agent_id: str, start: datetime, end: datetime) -> list[Lead]:
        """Leads for ``agent_id`` created within ``[start, end]``."""
        ...


class ConversationStore(Protocol):
    """Read access to conversations and their transcripts."""

    async def find_conversations(
        self,
        agent_id: str,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[Conversation]:
        """Conversations created within ``[start, end]``, newest first, at most ``limit``."""
        ...

    async def find_messages(self, conversation_id: str) -> list[Message]:
        """Full transcript of a conversation, oldest first."""
        ...

    async def has_messages(self, conversation_id: str) -> bool:
        """Whether the conversation has at least one message."""
        ...


class ConversionStore(Protocol):
    """Write access for attributed conversions."""

    async def insert_conversion(self, record: ConversionRecord) -> bool:
        """Persist a record. Returns False if the order was already recorded."""
        ...
