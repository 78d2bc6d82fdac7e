"""Lead queries for attribution."""

from datetime import datetime

from psycopg import AsyncConnection

from chatattribution.engine.schema import Lead


async def find_leads_by_agent_and_window(
    conn: AsyncConnection,
    agent_id: str,
    start: datetime,
    end: datetime,
) -> list[Lead]:
    """Get an agent's leads created within ``[start, end]``."""
    row = await conn.execute(
        """
        SELECT conversation_id::text, created_at, lead_data_json
        FROM leads
        WHERE agent_id = %s
          AND created_at >= %s
          AND created_at <= %s
        """,
        (agent_id, start, end),
    )
    results = await row.fetchall()
    return [_row_to_lead(r) for r in results]


def _row_to_lead(row: tuple) -> Lead:
    """Convert a database row to a Lead model."""
    return Lead(
        conversation_id=row[0],
        created_at=row[1],
        lead_data=row[2] or {},
    )
