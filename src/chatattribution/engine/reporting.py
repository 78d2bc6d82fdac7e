"""Revenue summaries over persisted conversion records."""

from collections import Counter
from decimal import Decimal
from typing import Literal

from chatattribution.engine.schema import ConversionRecord

ConfidenceTier = Literal["high", "medium", "low"]

HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5


def confidence_tier(confidence: float) -> ConfidenceTier:
    """Bucket a confidence score for reporting."""
    if confidence >= HIGH_CONFIDENCE:
        return "high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


def summarize_conversation(conversation_id: str, records: list[ConversionRecord]) -> dict:
    """Summarise the orders attributed to a conversation.

    A record counts toward the conversation if the conversation is its
    primary match or any of its matched candidates. Keys with nothing to
    report are omitted.

    Args:
        conversation_id: Conversation being reported on.
        records: Conversion records, typically those containing the conversation.

    Returns:
        A dict with order counts, revenue per currency, average confidence,
        and breakdowns by attribution method and confidence tier.
    """
    relevant = [
        r
        for r in records
        if r.primary_conversation_id == conversation_id
        or conversation_id in r.all_matched_conversation_ids
    ]

    summary: dict = {"conversation_id": conversation_id, "order_count": len(relevant)}
    if not relevant:
        return summary

    revenue: dict[str, Decimal] = {}
    for record in relevant:
        revenue[record.currency_code] = revenue.get(record.currency_code, Decimal("0")) + (
            record.order_total
        )
    summary["total_revenue"] = {currency: str(total) for currency, total in revenue.items()}

    summary["avg_confidence"] = round(
        sum(r.attribution_confidence for r in relevant) / len(relevant), 4
    )

    primary = sum(1 for r in relevant if r.primary_conversation_id == conversation_id)
    if primary:
        summary["primary_order_count"] = primary

    multi_touch = sum(1 for r in relevant if len(r.all_matched_conversation_ids) > 1)
    if multi_touch:
        summary["multi_touch_count"] = multi_touch

    summary["attribution_breakdown"] = dict(Counter(r.attribution_method for r in relevant))
    summary["confidence_distribution"] = dict(
        Counter(confidence_tier(r.attribution_confidence) for r in relevant)
    )

    return summary
