"""Pytest fixtures for Chat Attribution tests."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from chatattribution.engine.schema import (
    Conversation,
    ConversionRecord,
    Lead,
    LineItem,
    Message,
    OrderEvent,
)

AGENT_ID = "agent-1"
ORDER_TIME = datetime(2025, 3, 14, 12, 0, tzinfo=UTC)


class FakeLeadStore:
    """In-memory LeadStore that honours the window like the SQL query."""

    def __init__(self) -> None:
        self.leads: list[tuple[str, Lead]] = []
        self.calls = 0

    def add(self, conversation_id: str, email: str | None, ago: timedelta, agent_id=AGENT_ID):
        data = {"name": "Visitor"}
        if email is not None:
            data["email"] = email
        lead = Lead(conversation_id=conversation_id, created_at=ORDER_TIME - ago, lead_data=data)
        self.leads.append((agent_id, lead))
        return lead

    async def find_leads(self, agent_id, start, end):
        self.calls += 1
        return [
            lead
            for owner, lead in self.leads
            if owner == agent_id and start <= lead.created_at <= end
        ]


class FakeConversationStore:
    """In-memory ConversationStore."""

    def __init__(self) -> None:
        self.conversations: list[Conversation] = []
        self.messages: dict[str, list[Message]] = {}
        self.transcript_reads: list[str] = []

    def add(self, conversation_id: str, ago: timedelta, messages=(), agent_id=AGENT_ID):
        conversation = Conversation(
            conversation_id=conversation_id,
            agent_id=agent_id,
            created_at=ORDER_TIME - ago,
        )
        self.conversations.append(conversation)
        self.messages[conversation_id] = [
            Message(conversation_id=conversation_id, content=text) for text in messages
        ]
        return conversation

    async def find_conversations(self, agent_id, start, end, limit):
        found = [
            c
            for c in self.conversations
            if c.agent_id == agent_id and start <= c.created_at <= end
        ]
        found.sort(key=lambda c: c.created_at, reverse=True)
        return found[:limit]

    async def find_messages(self, conversation_id):
        self.transcript_reads.append(conversation_id)
        return list(self.messages.get(conversation_id, []))

    async def has_messages(self, conversation_id):
        return bool(self.messages.get(conversation_id))


class FakeConversionStore:
    """In-memory ConversionStore with the (agent_id, order_id) uniqueness rule."""

    def __init__(self) -> None:
        self.records: list[ConversionRecord] = []

    async def insert_conversion(self, record):
        if any(
            r.agent_id == record.agent_id and r.order_id == record.order_id for r in self.records
        ):
            return False
        self.records.append(record)
        return True

    async def list_conversions(self, agent_id, *, since=None, until=None, limit=100, offset=0):
        records = [
            r
            for r in self.records
            if r.agent_id == agent_id
            and (since is None or r.recorded_at >= since)
            and (until is None or r.recorded_at <= until)
        ]
        records.sort(key=lambda r: r.recorded_at, reverse=True)
        return records[offset : offset + limit]

    async def find_conversions_for_conversation(self, agent_id, conversation_id):
        return [
            r
            for r in self.records
            if r.agent_id == agent_id
            and (
                r.primary_conversation_id == conversation_id
                or conversation_id in r.all_matched_conversation_ids
            )
        ]


def make_order(
    email: str | None = None,
    titles: tuple[str, ...] = (),
    order_id: str = "1001",
    total: str = "59.90",
) -> OrderEvent:
    """Create an OrderEvent placed at ORDER_TIME."""
    return OrderEvent(
        order_id=order_id,
        created_at=ORDER_TIME,
        customer_email=email,
        line_items=[
            LineItem(product_id=str(100 + i), title=title, quantity=1)
            for i, title in enumerate(titles)
        ],
        total_amount=Decimal(total),
        currency_code="USD",
    )


@pytest.fixture
def leads() -> FakeLeadStore:
    return FakeLeadStore()


@pytest.fixture
def conversations() -> FakeConversationStore:
    return FakeConversationStore()


@pytest.fixture
def conversions() -> FakeConversionStore:
    return FakeConversionStore()


@pytest.fixture
def order_time() -> datetime:
    return ORDER_TIME


@pytest.fixture(name="make_order")
def make_order_fixture():
    """Factory for OrderEvents placed at ORDER_TIME."""
    return make_order
