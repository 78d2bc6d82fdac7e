"""Bridge from Shopify order payloads to ``OrderEvent``.

Two shapes arrive in practice: the REST ``orders/create`` webhook body and
the Admin GraphQL ``Order`` node used by order imports. Each shape is
described by a lenient pydantic model (unknown keys ignored, every field
optional) and then reduced to the same ``OrderEvent``. Any malformed
payload, nested values included, surfaces as ``pydantic.ValidationError``
before attribution runs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from chatattribution.engine.schema import LineItem, OrderEvent

_DEFAULT_CURRENCY = "USD"


def _blank_as_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


_Amount = Annotated[Decimal | None, BeforeValidator(_blank_as_none)]
"""Money amount as sent by Shopify; a blank string counts as missing."""


def gid_tail(value: object) -> str | None:
    """Reduce a Shopify global id (``gid://shopify/Order/123``) to ``"123"``."""
    if value is None:
        return None
    text = str(value)
    return text.rsplit("/", 1)[-1] or None


# =============================================================================
# PAYLOAD SHAPES
# =============================================================================


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class _Customer(_Payload):
    email: str | None = None


class _RestLineItem(_Payload):
    product_id: str | int | None = None
    title: str | None = None
    quantity: int | None = None


class _RestOrder(_Payload):
    """The ``orders/create`` webhook body."""

    id: str | int | None = None
    created_at: datetime | None = None
    email: str | None = None
    customer: _Customer | None = None
    line_items: list[_RestLineItem] | None = None
    total_price: _Amount = None
    currency: str | None = None


class _GraphQLPayload(_Payload):
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _Product(_GraphQLPayload):
    id: str | int | None = None


class _Variant(_GraphQLPayload):
    product: _Product | None = None


class _GraphQLLineItem(_GraphQLPayload):
    title: str | None = None
    quantity: int | None = None
    variant: _Variant | None = None


class _LineItemEdge(_GraphQLPayload):
    node: _GraphQLLineItem | None = None


class _LineItemConnection(_GraphQLPayload):
    edges: list[_LineItemEdge] | None = None


class _Money(_GraphQLPayload):
    amount: _Amount = None
    currency_code: str | None = None


class _MoneyBag(_GraphQLPayload):
    shop_money: _Money | None = None


class _GraphQLOrder(_GraphQLPayload):
    """An Admin GraphQL ``Order`` node."""

    id: str | int | None = None
    created_at: datetime | None = None
    email: str | None = None
    customer: _Customer | None = None
    line_items: _LineItemConnection | None = None
    total_price_set: _MoneyBag | None = None


# =============================================================================
# PARSING
# =============================================================================


def parse_order(payload: dict) -> OrderEvent:
    """Parse either Shopify order shape into an ``OrderEvent``.

    Args:
        payload: REST webhook body or GraphQL order node.

    Returns:
        The validated order.

    Raises:
        pydantic.ValidationError: If the payload is malformed or lacks an
            id or creation time.
    """
    if "lineItems" in payload or "createdAt" in payload or "totalPriceSet" in payload:
        return _from_graphql(_GraphQLOrder.model_validate(payload))
    return _from_rest(_RestOrder.model_validate(payload))


def _from_rest(order: _RestOrder) -> OrderEvent:
    line_items = [
        LineItem(
            product_id=gid_tail(item.product_id),
            title=item.title or "",
            quantity=item.quantity or 0,
        )
        for item in order.line_items or []
    ]
    return OrderEvent.model_validate(
        {
            "order_id": gid_tail(order.id) or "",
            "created_at": order.created_at,
            "customer_email": _email(order.customer, order.email),
            "line_items": line_items,
            "total_amount": order.total_price or Decimal("0"),
            "currency_code": order.currency or _DEFAULT_CURRENCY,
        }
    )


def _from_graphql(order: _GraphQLOrder) -> OrderEvent:
    line_items = []
    edges = order.line_items.edges if order.line_items else None
    for edge in edges or []:
        node = edge.node or _GraphQLLineItem()
        product = node.variant.product if node.variant else None
        line_items.append(
            LineItem(
                product_id=gid_tail(product.id if product else None),
                title=node.title or "",
                quantity=node.quantity or 0,
            )
        )
    money = order.total_price_set.shop_money if order.total_price_set else None
    money = money or _Money()
    return OrderEvent.model_validate(
        {
            "order_id": gid_tail(order.id) or "",
            "created_at": order.created_at,
            "customer_email": _email(order.customer, order.email),
            "line_items": line_items,
            "total_amount": money.amount or Decimal("0"),
            "currency_code": money.currency_code or _DEFAULT_CURRENCY,
        }
    )


def _email(customer: _Customer | None, fallback: str | None) -> str | None:
    """Customer email, falling back to the order-level email when blank."""
    return (customer.email if customer else None) or fallback
