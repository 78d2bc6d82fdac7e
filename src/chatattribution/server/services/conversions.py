"""Conversion record persistence and queries."""

from datetime import datetime

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from chatattribution.engine.schema import ConversionRecord

_COLUMNS = """
    agent_id::text, conversation_id::text, conversation_ids::text[], order_id,
    order_total, currency, products_purchased, attribution_type,
    attribution_confidence, created_at
"""


async def insert_conversion(
    conn: AsyncConnection,
    record: ConversionRecord,
) -> bool:
    """Insert a conversion record.

    Returns False when the agent already has a record for the order.
    """
    row = await conn.execute(
        """
        INSERT INTO agent_conversions (
            agent_id, conversation_id, conversation_ids, conversion_type,
            order_id, order_total, attributed_revenue, currency,
            products_purchased, attribution_type, attribution_confidence,
            created_at
        )
        VALUES (%s, %s, %s, 'purchase', %s, %s, %s, %s, %s, %s, %s, %s)
        ON CONFLICT (agent_id, order_id) DO NOTHING
        RETURNING id
        """,
        (
            record.agent_id,
            record.primary_conversation_id,
            record.all_matched_conversation_ids,
            record.order_id,
            record.order_total,
            record.order_total,
            record.currency_code,
            Jsonb([p.model_dump(mode="json") for p in record.purchased_products]),
            record.attribution_method,
            record.attribution_confidence,
            record.recorded_at,
        ),
    )
    return await row.fetchone() is not None


async def list_conversions(
    conn: AsyncConnection,
    agent_id: str,
    *,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int = 100,
    offset: int = 0,
) -> list[ConversionRecord]:
    """List an agent's conversion records, newest first."""
    conditions = ["agent_id = %s"]
    params: list = [agent_id]

    if since is not None:
        conditions.append("created_at >= %s")
        params.append(since)

    if until is not None:
        conditions.append("created_at <= %s")
        params.append(until)

    where_clause = " AND ".join(conditions)

    query = f"""
        SELECT {_COLUMNS}
        FROM agent_conversions
        WHERE {where_clause}
        ORDER BY created_at DESC
        LIMIT %s OFFSET %s
    """
    params.extend([limit, offset])

    row = await conn.execute(query, tuple(params))
    results = await row.fetchall()
    return [_row_to_record(r) for r in results]


async def find_conversions_for_conversation(
    conn: AsyncConnection,
    agent_id: str,
    conversation_id: str,
) -> list[ConversionRecord]:
    """Get an agent's records where the conversation is primary or a matched candidate."""
    row = await conn.execute(
        f"""
        SELECT {_COLUMNS}
        FROM agent_conversions
        WHERE agent_id = %s
          AND (conversation_id = %s OR %s = ANY(conversation_ids))
        ORDER BY created_at DESC
        """,
        (agent_id, conversation_id, conversation_id),
    )
    results = await row.fetchall()
    return [_row_to_record(r) for r in results]


def _row_to_record(row: tuple) -> ConversionRecord:
    """Convert a database row to a ConversionRecord model."""
    return ConversionRecord(
        agent_id=row[0],
        primary_conversation_id=row[1],
        all_matched_conversation_ids=row[2] or [],
        order_id=row[3],
        order_total=row[4],
        currency_code=row[5],
        purchased_products=row[6] or [],
        attribution_method=row[7],
        attribution_confidence=row[8],
        recorded_at=row[9],
    )
