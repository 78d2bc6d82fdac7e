"""
Chat Attribution Engine - attribute e-commerce orders to chat conversations.

Given a verified order, the engine correlates identity (order email vs.
captured leads), content (purchased titles vs. transcript) and time
(recent conversations) to pick the conversation most likely to have
driven the purchase, with a graded confidence.

Example:
    >>> from chatattribution.engine import AttributionEngine, record_conversion
    >>> engine = AttributionEngine(lead_store, conversation_store)
    >>> result = await engine.attribute(order, agent_id="agent-1")
    >>> await record_conversion(conversion_store, "agent-1", order, result)
"""

from chatattribution.engine.engine import (
    AttributionEngine,
    AttributionStrategy,
    EmailMatchStrategy,
    TemporalProximityStrategy,
    build_conversion_record,
    corroborate_with_transcript,
    record_conversion,
)
from chatattribution.engine.schema import (
    AttributionMethod,
    AttributionResult,
    Conversation,
    ConversionRecord,
    Lead,
    LineItem,
    Message,
    OrderEvent,
)
from chatattribution.engine.shopify import parse_order
from chatattribution.engine.stores import ConversationStore, ConversionStore, LeadStore

__all__ = [
    # Engine
    "AttributionEngine",
    "AttributionStrategy",
    "EmailMatchStrategy",
    "TemporalProximityStrategy",
    "corroborate_with_transcript",
    "build_conversion_record",
    "record_conversion",
    # Shopify bridge
    "parse_order",
    # Store protocols
    "LeadStore",
    "ConversationStore",
    "ConversionStore",
    # Type aliases
    "AttributionMethod",
    # Models
    "LineItem",
    "OrderEvent",
    "Lead",
    "Message",
    "Conversation",
    "AttributionResult",
    "ConversionRecord",
]

__version__ = "0.1.0"
