"""Stripe checkout payloads in, order details out.

Everything Stripe sends is loosely structured; the helpers here read it into
explicit dataclasses once, so the routes and email templates never poke at
nested optional dicts themselves.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional

log = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
NO_SHIPPING = "No shipping address provided."
MONEY_PRECISION = 400


class InvalidCart(ValueError):
    pass


def to_minor_units(price: Any) -> int:
    """Dollars -> cents, rounding half up."""
    try:
        amount = Decimal(str(price))
    except InvalidOperation as e:
        raise InvalidCart(f"invalid price {price!r}") from e
    if not amount.is_finite() or amount < 0:
        raise InvalidCart(f"invalid price {price!r}")
    # wide enough for any float; default context stops at 28 digits
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        try:
            return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except InvalidOperation as e:
            raise InvalidCart(f"invalid price {price!r}") from e


def _coerce_qty(qty: Any) -> int:
    try:
        n = int(float(qty))
    except (TypeError, ValueError, OverflowError):
        return 1
    return n if n >= 1 else 1


def format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_line_items(cart: dict, currency: str = "usd") -> list[dict]:
    if not isinstance(cart, dict) or not cart:
        raise InvalidCart("Cart empty")

    line_items = []
    for key, item in cart.items():
        if not isinstance(item, dict):
            raise InvalidCart(f"Invalid cart item {key}")
        name = str(item.get("name") or key).strip()
        if not name:
            raise InvalidCart("Cart item without a name")
        line_items.append({
            "quantity": _coerce_qty(item.get("qty")),
            "price_data": {
                "currency": currency,
                "product_data": {"name": name},
                "unit_amount": to_minor_units(item.get("price")),
            },
        })
    return line_items


def parse_cart_metadata(metadata: Optional[dict]) -> dict:
    raw = (metadata or {}).get("cart_json") or "{}"
    try:
        cart = json.loads(raw)
    except (TypeError, ValueError):
        log.warning("could not parse cart_json metadata, continuing with an empty cart")
        return {}
    if not isinstance(cart, dict):
        return {}
    return cart


# ---------------- checkout.session.completed ----------------

def _obj(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class Address:
    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @classmethod
    def from_stripe(cls, data: Any) -> "Address":
        data = _obj(data)
        return cls(
            line1=_str(data.get("line1")),
            line2=_str(data.get("line2")),
            city=_str(data.get("city")),
            state=_str(data.get("state")),
            postal_code=_str(data.get("postal_code")),
            country=_str(data.get("country")),
        )


@dataclass
class ShippingDetails:
    name: str = ""
    address: Address = field(default_factory=Address)

    @classmethod
    def from_session(cls, session: dict) -> Optional["ShippingDetails"]:
        # newer API versions moved shipping under collected_information
        data = session.get("shipping_details") or _obj(session.get("collected_information")).get("shipping_details")
        if not isinstance(data, dict):
            return None
        return cls(name=_str(data.get("name")), address=Address.from_stripe(data.get("address")))

    def as_text(self, fallback_name: str) -> str:
        a = self.address
        street = a.line1 + (f"\n{a.line2}" if a.line2 else "")
        return (
            f"{self.name or fallback_name}\n"
            f"{street}\n"
            f"{a.city}, {a.state} {a.postal_code}\n"
            f"{a.country}"
        )


@dataclass
class CheckoutCompleted:
    session_id: str
    customer_name: str = "Customer"
    customer_email: Optional[str] = None
    shipping: Optional[ShippingDetails] = None
    cart: dict = field(default_factory=dict)
    amount_total: Optional[int] = None

    @classmethod
    def from_session(cls, session: dict) -> "CheckoutCompleted":
        details = _obj(session.get("customer_details"))
        amount = session.get("amount_total")
        return cls(
            session_id=_str(session.get("id")),
            customer_name=_str(details.get("name")) or "Customer",
            customer_email=_str(details.get("email")) or _str(session.get("customer_email")) or None,
            shipping=ShippingDetails.from_session(session),
            cart=parse_cart_metadata(_obj(session.get("metadata"))),
            amount_total=amount if isinstance(amount, int) and not isinstance(amount, bool) else None,
        )

    @property
    def shipping_text(self) -> str:
        if self.shipping is None:
            return NO_SHIPPING
        return self.shipping.as_text(self.customer_name)

    @property
    def items_text(self) -> str:
        lines = []
        for item in self.cart.values():
            if not isinstance(item, dict):
                continue
            lines.append(
                f"{format_number(item.get('qty'))}× {item.get('name')} — ${format_number(item.get('price'))}"
            )
        return "\n".join(lines)

    @property
    def total_text(self) -> str:
        if not self.amount_total:
            return "(unknown)"
        return f"${self.amount_total / 100:.2f}"
