"""Tests for Chat Attribution schema validation."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from chatattribution.engine import (
    AttributionResult,
    ConversionRecord,
    Lead,
    LineItem,
    OrderEvent,
)


class TestOrderEvent:
    """Tests for the order input model."""

    def test_requires_order_id(self):
        """GIVEN an empty order id
        WHEN the order is validated
        SHOULD reject it before attribution runs."""
        with pytest.raises(ValidationError):
            OrderEvent(order_id="", created_at=datetime.now(UTC))

    def test_requires_created_at(self):
        with pytest.raises(ValidationError):
            OrderEvent.model_validate({"order_id": "1"})

    def test_naive_timestamp_is_utc(self):
        order = OrderEvent(order_id="1", created_at=datetime(2025, 3, 14, 12, 0))
        assert order.created_at.tzinfo is UTC

    def test_blank_email_is_none(self):
        order = OrderEvent(order_id="1", created_at=datetime.now(UTC), customer_email="  ")
        assert order.customer_email is None

    def test_is_immutable(self):
        order = OrderEvent(order_id="1", created_at=datetime.now(UTC))
        with pytest.raises(ValidationError):
            order.order_id = "2"

    def test_defaults(self):
        order = OrderEvent(order_id="1", created_at=datetime.now(UTC))
        assert order.line_items == []
        assert order.total_amount == Decimal("0")
        assert order.currency_code == "USD"

    def test_negative_total_rejected(self):
        with pytest.raises(ValidationError):
            OrderEvent(order_id="1", created_at=datetime.now(UTC), total_amount=Decimal("-1"))


class TestLead:
    def test_email_lowercased(self):
        lead = Lead(
            conversation_id="c1",
            created_at=datetime.now(UTC),
            lead_data={"email": "User@Example.com", "name": "Ada"},
        )
        assert lead.email_lowercased == "user@example.com"

    @pytest.mark.parametrize("data", [{}, {"email": ""}, {"email": None}, {"email": 42}])
    def test_missing_email(self, data):
        lead = Lead(conversation_id="c1", created_at=datetime.now(UTC), lead_data=data)
        assert lead.email_lowercased is None


class TestAttributionResult:
    """The result model enforces its own consistency rules."""

    def test_miss(self):
        miss = AttributionResult.miss()
        assert miss.conversation_id is None
        assert miss.confidence == 0.0
        assert not miss.matched
        assert miss.attribution_type == ""

    def test_matched_requires_confidence(self):
        with pytest.raises(ValidationError):
            AttributionResult(
                conversation_id="c1",
                confidence=0.0,
                methods=["email_match"],
                candidate_conversation_ids=["c1"],
            )

    def test_miss_cannot_have_confidence(self):
        with pytest.raises(ValidationError):
            AttributionResult(confidence=0.5)

    def test_matched_requires_method(self):
        with pytest.raises(ValidationError):
            AttributionResult(
                conversation_id="c1", confidence=0.5, candidate_conversation_ids=["c1"]
            )

    def test_winner_must_be_candidate(self):
        with pytest.raises(ValidationError):
            AttributionResult(
                conversation_id="c1",
                confidence=0.5,
                methods=["temporal_proximity"],
                candidate_conversation_ids=["c2"],
            )

    def test_confidence_upper_bound(self):
        with pytest.raises(ValidationError):
            AttributionResult(
                conversation_id="c1",
                confidence=1.2,
                methods=["email_match"],
                candidate_conversation_ids=["c1"],
            )

    def test_methods_and_candidates_deduplicated_in_order(self):
        result = AttributionResult(
            conversation_id="c1",
            confidence=0.9,
            methods=["email_match", "product_mention", "email_match"],
            candidate_conversation_ids=["c1", "c2", "c1"],
        )
        assert result.methods == ["email_match", "product_mention"]
        assert result.candidate_conversation_ids == ["c1", "c2"]
        assert result.attribution_type == "email_match+product_mention"

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError):
            AttributionResult(
                conversation_id="c1",
                confidence=0.9,
                methods=["utm_source"],
                candidate_conversation_ids=["c1"],
            )

    def test_json_includes_attribution_type(self):
        result = AttributionResult(
            conversation_id="c1",
            confidence=0.5,
            methods=["temporal_proximity"],
            candidate_conversation_ids=["c1"],
        )
        data = result.model_dump(mode="json")
        assert data["attribution_type"] == "temporal_proximity"


class TestConversionRecord:
    def test_json_keeps_decimal_total_exact(self):
        record = ConversionRecord(
            agent_id="agent-1",
            primary_conversation_id="c1",
            all_matched_conversation_ids=["c1"],
            order_id="1001",
            order_total=Decimal("19.99"),
            purchased_products=[LineItem(product_id="8", title="Cap", quantity=2)],
            attribution_method="email_match",
            attribution_confidence=0.95,
        )

        restored = ConversionRecord.model_validate(record.model_dump(mode="json"))

        assert restored.order_total == Decimal("19.99")
        assert restored.purchased_products[0].quantity == 2
        assert restored.recorded_at.tzinfo is not None
