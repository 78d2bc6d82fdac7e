"""
Chat Attribution Schema

This module defines the data types exchanged by the attribution engine:
the incoming order, the read-only lead and conversation records it
correlates against, and the result and conversion record it produces.

Timestamps are always timezone-aware; naive values are interpreted as UTC
so that elapsed-time arithmetic between orders and conversations is safe.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

# =============================================================================
# TYPE DEFINITIONS
# =============================================================================

AttributionMethod = Literal[
    "email_match",         # Order email matched a captured lead
    "product_mention",     # Transcript mentions purchased products
    "temporal_proximity",  # Recent conversation, time-only correlation
]
"""
Method tags recorded on a result, in the order they were applied.

Persisted joined with ``+`` (e.g. ``email_match+product_mention``).
"""


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# =============================================================================
# INPUT MODELS
# =============================================================================


class LineItem(BaseModel):
    """
    A purchased line item, snapshotted onto the conversion record.

    Attributes:
        product_id: Store product identifier (gid tail, e.g. "8123").
        title: Line item title as shown at checkout.
        quantity: Units purchased.
    """

    product_id: str | None = None
    title: str
    quantity: int = Field(default=1, ge=0)


class OrderEvent(BaseModel):
    """
    A verified e-commerce order, one per webhook delivery.

    Attributes:
        order_id: Opaque external order identifier.
        created_at: When the order was placed.
        customer_email: Buyer email, if one was supplied.
        line_items: Purchased items, possibly empty.
        total_amount: Order total in major currency units.
        currency_code: ISO 4217 currency code.

    Example:
        >>> order = OrderEvent(
        ...     order_id="5521",
        ...     created_at=datetime.now(UTC),
        ...     customer_email="a@x.com",
        ...     line_items=[LineItem(product_id="81", title="Trail Runner")],
        ...     total_amount=Decimal("129.00"),
        ... )
    """

    model_config = ConfigDict(frozen=True)

    order_id: str = Field(min_length=1)
    created_at: datetime
    customer_email: str | None = None
    line_items: list[LineItem] = Field(default_factory=list)
    total_amount: Decimal = Field(default=Decimal("0"), ge=0)
    currency_code: str = "USD"

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_validator("customer_email")
    @classmethod
    def _blank_email_is_missing(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value


class Lead(BaseModel):
    """
    A captured contact-form submission, tied to exactly one conversation.

    Attributes:
        conversation_id: Conversation the form was submitted from.
        created_at: Submission time.
        lead_data: Raw form payload as captured by the widget.
    """

    conversation_id: str
    created_at: datetime
    lead_data: dict = Field(default_factory=dict)

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def email_lowercased(self) -> str | None:
        """Form email, lower-cased for case-insensitive matching."""
        email = self.lead_data.get("email")
        if not isinstance(email, str) or not email:
            return None
        return email.lower()


class Message(BaseModel):
    """A stored chat message. Only content is used; roles are not weighted."""

    conversation_id: str
    content: str = ""
    created_at: datetime | None = None


class Conversation(BaseModel):
    """A chat conversation owned by an agent."""

    conversation_id: str
    agent_id: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _created_at_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


# =============================================================================
# OUTPUT MODELS
# =============================================================================


class AttributionResult(BaseModel):
    """
    Outcome of attributing one order.

    Attributes:
        conversation_id: Best-matching conversation, or None for a miss.
        confidence: Heuristic score in [0, 1]; 0.0 exactly when there is no match.
        methods: Method tags applied, in order, without duplicates.
        candidate_conversation_ids: Every conversation that satisfied the
            primary matching stage, kept for audit.
    """

    model_config = ConfigDict(frozen=True)

    conversation_id: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    methods: list[AttributionMethod] = Field(default_factory=list)
    candidate_conversation_ids: list[str] = Field(default_factory=list)

    @field_validator("methods", "candidate_conversation_ids")
    @classmethod
    def _dedupe(cls, value: list) -> list:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def _check_consistency(self) -> "AttributionResult":
        if self.conversation_id is None:
            if self.confidence != 0.0 or self.methods:
                raise ValueError("a result without a conversation must have zero confidence")
            return self
        if self.confidence == 0.0:
            raise ValueError("an attributed result must have non-zero confidence")
        if not self.methods:
            raise ValueError("an attributed result must record at least one method")
        if self.conversation_id not in self.candidate_conversation_ids:
            raise ValueError("conversation_id must be one of candidate_conversation_ids")
        return self

    @classmethod
    def miss(cls) -> "AttributionResult":
        """The null result: no conversation, zero confidence."""
        return cls()

    @property
    def matched(self) -> bool:
        """Whether a conversation was credited."""
        return self.conversation_id is not None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def attribution_type(self) -> str:
        """Method tags joined with ``+``, as persisted."""
        return "+".join(self.methods)


class ConversionRecord(BaseModel):
    """
    Persisted, write-once outcome of a successful attribution.

    Attributes:
        agent_id: Agent that owns the attributed conversation.
        primary_conversation_id: The winning conversation.
        all_matched_conversation_ids: All candidates from the primary stage.
        order_id: External order identifier.
        order_total: Order total in major currency units.
        currency_code: ISO 4217 currency code.
        purchased_products: Snapshot of the order's line items.
        attribution_method: Joined method tags.
        attribution_confidence: Final confidence.
        recorded_at: When the record was created.
    """

    agent_id: str
    primary_conversation_id: str
    all_matched_conversation_ids: list[str] = Field(default_factory=list)
    order_id: str
    order_total: Decimal
    currency_code: str = "USD"
    purchased_products: list[LineItem] = Field(default_factory=list)
    attribution_method: str
    attribution_confidence: float = Field(ge=0.0, le=1.0)
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
