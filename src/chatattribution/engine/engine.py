"""Conversation-to-purchase attribution engine."""

import logging
from collections.abc import Sequence
from typing import Protocol

from chatattribution.engine.schema import (
    AttributionResult,
    ConversionRecord,
    Lead,
    OrderEvent,
)
from chatattribution.engine.scoring import (
    IDENTITY_BANDS,
    TEMPORAL_BANDS,
    TEMPORAL_CANDIDATE_LIMIT,
    LookbackWindow,
    band_confidence,
    hours_between,
    mention_boost,
)
from chatattribution.engine.stores import ConversationStore, ConversionStore, LeadStore

logger = logging.getLogger(__name__)


class AttributionStrategy(Protocol):
    """One stage of the attribution cascade."""

    async def attempt(
        self,
        order: OrderEvent,
        agent_id: str,
        window: LookbackWindow,
    ) -> tuple[AttributionResult, bool]:
        """Return the stage's result and whether it matched."""
        ...


async def corroborate_with_transcript(
    conversations: ConversationStore,
    order: OrderEvent,
    result: AttributionResult,
) -> AttributionResult:
    """Boost ``result`` when its conversation mentions the purchased products.

    Titles are matched as lower-cased substrings of the whole transcript.
    Returns ``result`` unchanged if the order has no line items, the
    transcript is empty, or no title is mentioned.
    """
    if not order.line_items or result.conversation_id is None:
        return result

    messages = await conversations.find_messages(result.conversation_id)
    if not messages:
        logger.debug("No transcript for conversation %s", result.conversation_id)
        return result

    transcript = " ".join(m.content for m in messages).lower()
    titles = [item.title.lower() for item in order.line_items]
    mentioned = sum(1 for title in titles if title.strip() and title in transcript)
    if mentioned == 0:
        return result

    confidence = mention_boost(result.confidence, mentioned, len(titles))
    logger.info(
        "Products mentioned: %d/%d, confidence boosted to %.2f",
        mentioned,
        len(titles),
        confidence,
    )
    return AttributionResult(
        conversation_id=result.conversation_id,
        confidence=confidence,
        methods=[*result.methods, "product_mention"],
        candidate_conversation_ids=result.candidate_conversation_ids,
    )


class EmailMatchStrategy:
    """Match the order email against leads, then corroborate with the transcript."""

    def __init__(self, leads: LeadStore, conversations: ConversationStore) -> None:
        self.leads = leads
        self.conversations = conversations

    async def attempt(
        self,
        order: OrderEvent,
        agent_id: str,
        window: LookbackWindow,
    ) -> tuple[AttributionResult, bool]:
        if order.customer_email is None:
            logger.debug("Order %s has no email, skipping email match", order.order_id)
            return AttributionResult.miss(), False

        email = order.customer_email.lower()
        leads = await self.leads.find_leads(agent_id, window.start, window.end)
        matching: list[Lead] = [
            lead
            for lead in leads
            if window.contains(lead.created_at) and lead.email_lowercased == email
        ]
        if not matching:
            return AttributionResult.miss(), False

        matching.sort(key=lambda lead: lead.created_at, reverse=True)
        most_recent = matching[0]
        hours = hours_between(most_recent.created_at, order.created_at)

        result = AttributionResult(
            conversation_id=most_recent.conversation_id,
            confidence=band_confidence(IDENTITY_BANDS, hours),
            methods=["email_match"],
            candidate_conversation_ids=[lead.conversation_id for lead in matching],
        )
        logger.info(
            "Email match found: conversation %s, confidence %.2f",
            result.conversation_id,
            result.confidence,
        )
        return await corroborate_with_transcript(self.conversations, order, result), True


class TemporalProximityStrategy:
    """Fall back to the most recent conversation that has any messages."""

    def __init__(
        self,
        conversations: ConversationStore,
        limit: int = TEMPORAL_CANDIDATE_LIMIT,
    ) -> None:
        self.conversations = conversations
        self.limit = limit

    async def attempt(
        self,
        order: OrderEvent,
        agent_id: str,
        window: LookbackWindow,
    ) -> tuple[AttributionResult, bool]:
        recent = await self.conversations.find_conversations(
            agent_id, window.start, window.end, self.limit
        )
        recent = sorted(
            (c for c in recent if window.contains(c.created_at)),
            key=lambda c: c.created_at,
            reverse=True,
        )[: self.limit]

        # Empty conversations cannot have influenced a purchase.
        with_messages = []
        for conversation in recent:
            if await self.conversations.has_messages(conversation.conversation_id):
                with_messages.append(conversation)

        if not with_messages:
            return AttributionResult.miss(), False

        most_recent = with_messages[0]
        hours = hours_between(most_recent.created_at, order.created_at)
        result = AttributionResult(
            conversation_id=most_recent.conversation_id,
            confidence=band_confidence(TEMPORAL_BANDS, hours),
            methods=["temporal_proximity"],
            candidate_conversation_ids=[c.conversation_id for c in with_messages],
        )
        logger.info(
            "Temporal match found: conversation %s, confidence %.2f",
            result.conversation_id,
            result.confidence,
        )
        return result, True


class AttributionEngine:
    """
    Determine which conversation, if any, caused an order.

    Strategies run in order and the first match wins. The default cascade
    is email match (with transcript corroboration) followed by temporal
    proximity.

    Usage:
        engine = AttributionEngine(leads, conversations)
        result = await engine.attribute(order, agent_id)
        await record_conversion(conversion_store, agent_id, order, result)
    """

    def __init__(
        self,
        leads: LeadStore,
        conversations: ConversationStore,
        strategies: Sequence[AttributionStrategy] | None = None,
    ) -> None:
        self.strategies: tuple[AttributionStrategy, ...] = tuple(
            strategies
            if strategies is not None
            else (
                EmailMatchStrategy(leads, conversations),
                TemporalProximityStrategy(conversations),
            )
        )

    async def attribute(self, order: OrderEvent, agent_id: str) -> AttributionResult:
        """Attribute ``order`` to one of ``agent_id``'s conversations.

        Returns ``AttributionResult.miss()`` when no strategy matches.
        Store errors propagate to the caller.
        """
        window = LookbackWindow.for_order(order.created_at)
        logger.info(
            "Attribution attempt for order %s (email: %s)",
            order.order_id,
            "yes" if order.customer_email else "no",
        )
        for strategy in self.strategies:
            result, matched = await strategy.attempt(order, agent_id, window)
            if matched:
                return result
        logger.info("No attribution found for order %s", order.order_id)
        return AttributionResult.miss()


def build_conversion_record(
    agent_id: str,
    order: OrderEvent,
    result: AttributionResult,
) -> ConversionRecord:
    """Snapshot an attributed order into a conversion record."""
    if result.conversation_id is None:
        raise ValueError("cannot build a conversion record for an unattributed order")
    return ConversionRecord(
        agent_id=agent_id,
        primary_conversation_id=result.conversation_id,
        all_matched_conversation_ids=list(result.candidate_conversation_ids),
        order_id=order.order_id,
        order_total=order.total_amount,
        currency_code=order.currency_code,
        purchased_products=list(order.line_items),
        attribution_method=result.attribution_type,
        attribution_confidence=result.confidence,
    )


async def record_conversion(
    store: ConversionStore,
    agent_id: str,
    order: OrderEvent,
    result: AttributionResult,
) -> ConversionRecord | None:
    """Persist the conversion for an attributed order.

    Misses are not persisted. Returns the written record, or None when
    nothing was written (miss, or the order was already recorded).
    """
    if not result.matched:
        return None

    record = build_conversion_record(agent_id, order, result)
    if not await store.insert_conversion(record):
        logger.info("Conversion for order %s already recorded, skipping", order.order_id)
        return None
    logger.info("Conversion stored for order %s", order.order_id)
    return record
