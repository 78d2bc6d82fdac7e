"""Conversation and message queries for attribution."""

from datetime import datetime

from psycopg import AsyncConnection

from chatattribution.engine.schema import Conversation, Message


async def find_conversations_by_agent_and_window(
    conn: AsyncConnection,
    agent_id: str,
    start: datetime,
    end: datetime,
    limit: int,
) -> list[Conversation]:
    """Get an agent's conversations created within ``[start, end]``, newest first."""
    row = await conn.execute(
        """
        SELECT id::text, agent_id::text, created_at
        FROM conversations
        WHERE agent_id = %s
          AND created_at >= %s
          AND created_at <= %s
        ORDER BY created_at DESC
        LIMIT %s
        """,
        (agent_id, start, end, limit),
    )
    results = await row.fetchall()
    return [_row_to_conversation(r) for r in results]


async def find_messages(
    conn: AsyncConnection,
    conversation_id: str,
) -> list[Message]:
    """Get a conversation's messages, oldest first."""
    row = await conn.execute(
        """
        SELECT conversation_id::text, content, created_at
        FROM messages
        WHERE conversation_id = %s
        ORDER BY created_at ASC
        """,
        (conversation_id,),
    )
    results = await row.fetchall()
    return [_row_to_message(r) for r in results]


async def has_messages(
    conn: AsyncConnection,
    conversation_id: str,
) -> bool:
    """Check whether a conversation has at least one message."""
    row = await conn.execute(
        "SELECT 1 FROM messages WHERE conversation_id = %s LIMIT 1",
        (conversation_id,),
    )
    return await row.fetchone() is not None


def _row_to_conversation(row: tuple) -> Conversation:
    """Convert a database row to a Conversation model."""
    return Conversation(
        conversation_id=row[0],
        agent_id=row[1],
        created_at=row[2],
    )


def _row_to_message(row: tuple) -> Message:
    """Convert a database row to a Message model."""
    return Message(
        conversation_id=row[0],
        content=row[1] or "",
        created_at=row[2],
    )
