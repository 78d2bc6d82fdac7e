"""Postgres-backed implementations of the engine's store protocols."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from psycopg import AsyncConnection

from chatattribution.engine.schema import Conversation, ConversionRecord, Lead, Message
from chatattribution.engine.stores import ConversationStore, ConversionStore, LeadStore
from chatattribution.server.services import conversations as conversation_service
from chatattribution.server.services import conversions as conversion_service
from chatattribution.server.services import leads as lead_service


class ConversionRepository(ConversionStore, Protocol):
    """Conversion store with the read queries used by reporting routes."""

    async def list_conversions(
        self,
        agent_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ConversionRecord]: ...

    async def find_conversions_for_conversation(
        self, agent_id: str, conversation_id: str
    ) -> list[ConversionRecord]: ...


class PostgresLeadStore:
    def __init__(self, conn: AsyncConnection) -> None:
        self.conn = conn

    async def find_leads(self, agent_id: str, start: datetime, end: datetime) -> list[Lead]:
        return await lead_service.find_leads_by_agent_and_window(self.conn, agent_id, start, end)


class PostgresConversationStore:
    def __init__(self, conn: AsyncConnection) -> None:
        self.conn = conn

    async def find_conversations(
        self,
        agent_id: str,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[Conversation]:
        return await conversation_service.find_conversations_by_agent_and_window(
            self.conn, agent_id, start, end, limit
        )

    async def find_messages(self, conversation_id: str) -> list[Message]:
        return await conversation_service.find_messages(self.conn, conversation_id)

    async def has_messages(self, conversation_id: str) -> bool:
        return await conversation_service.has_messages(self.conn, conversation_id)


class PostgresConversionStore:
    def __init__(self, conn: AsyncConnection) -> None:
        self.conn = conn

    async def insert_conversion(self, record: ConversionRecord) -> bool:
        return await conversion_service.insert_conversion(self.conn, record)

    async def list_conversions(
        self,
        agent_id: str,
        *,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[ConversionRecord]:
        return await conversion_service.list_conversions(
            self.conn, agent_id, since=since, until=until, limit=limit, offset=offset
        )

    async def find_conversions_for_conversation(
        self, agent_id: str, conversation_id: str
    ) -> list[ConversionRecord]:
        return await conversion_service.find_conversions_for_conversation(
            self.conn, agent_id, conversation_id
        )


@dataclass(frozen=True)
class StoreBundle:
    """The stores one request works against."""

    leads: LeadStore
    conversations: ConversationStore
    conversions: ConversionRepository

    @classmethod
    def for_connection(cls, conn: AsyncConnection) -> "StoreBundle":
        return cls(
            leads=PostgresLeadStore(conn),
            conversations=PostgresConversationStore(conn),
            conversions=PostgresConversionStore(conn),
        )
