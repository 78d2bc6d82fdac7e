"""Server-side models for Chat Attribution."""

from datetime import datetime

from pydantic import BaseModel, Field

# Re-export engine schema types for convenience
from chatattribution.engine.schema import (
    AttributionMethod,
    AttributionResult,
    ConversionRecord,
    LineItem,
    OrderEvent,
)
from chatattribution.engine.scoring import LookbackWindow

__all__ = [
    # Engine re-exports
    "AttributionMethod",
    "AttributionResult",
    "ConversionRecord",
    "LineItem",
    "OrderEvent",
    # Server models
    "AttributeRequest",
    "OrderAnalysis",
    "AttributionResponse",
    "ConversationAttribution",
]


# =============================================================================
# API Input Models
# =============================================================================


class AttributeRequest(BaseModel):
    """Input for POST /attribute."""

    agent_id: str = Field(min_length=1)
    order: OrderEvent


# =============================================================================
# API Output Models
# =============================================================================


class OrderAnalysis(BaseModel):
    """What the engine had to work with for an order."""

    order_time: datetime
    lookback_start: datetime
    products_count: int
    has_email: bool

    @classmethod
    def for_order(cls, order: OrderEvent) -> "OrderAnalysis":
        window = LookbackWindow.for_order(order.created_at)
        return cls(
            order_time=order.created_at,
            lookback_start=window.start,
            products_count=len(order.line_items),
            has_email=order.customer_email is not None,
        )


class AttributionResponse(BaseModel):
    """Acknowledgement for an attributed (or unattributed) order."""

    status: str = "ok"
    order_id: str
    attribution: AttributionResult
    recorded: bool
    order_analysis: OrderAnalysis


class ConversationAttribution(BaseModel):
    """Conversion records touching a conversation, with a revenue summary."""

    conversation_id: str
    conversions: list[ConversionRecord] = Field(default_factory=list)
    summary: dict = Field(default_factory=dict)
