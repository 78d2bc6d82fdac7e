"""
Chat Attribution - conversation-to-purchase attribution for chat agents.

Links completed e-commerce orders back to the chat conversations that
drove them, for revenue reporting on multi-tenant chatbot deployments.

Example:
    >>> from chatattribution import AttributionEngine, OrderEvent
    >>> engine = AttributionEngine(lead_store, conversation_store)
    >>> result = await engine.attribute(order, agent_id="agent-1")
"""

from chatattribution.engine import (
    AttributionEngine,
    AttributionResult,
    ConversionRecord,
    OrderEvent,
    parse_order,
    record_conversion,
)

__all__ = [
    "AttributionEngine",
    "AttributionResult",
    "ConversionRecord",
    "OrderEvent",
    "parse_order",
    "record_conversion",
]

__version__ = "0.1.0"
