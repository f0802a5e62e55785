"""View layer for the cart drawer and the "add to cart" buttons.

Rendering is a full rebuild from the store every time; rows carry their own
freshly bound quantity handlers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Callable, Optional

from cart import CartStore
from payments import MONEY_PRECISION


def money(n: Any) -> str:
    amount = Decimal(str(n))
    if not amount.is_finite():
        return f"${n}"
    with localcontext() as ctx:
        ctx.prec = MONEY_PRECISION
        return f"${amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)}"


@dataclass
class CartRow:
    name: str
    price_text: str
    qty: int
    on_decrease: Callable[[], None]
    on_increase: Callable[[], None]


@dataclass
class CartView:
    rows: list[CartRow] = field(default_factory=list)
    count: int = 0
    total_text: str = "$0"
    empty: bool = True


def render_cart(store: CartStore, on_change: Callable[[], Any]) -> CartView:
    """Build the drawer contents for the current store state.

    ``on_change`` runs after either quantity button mutates the store.
    """
    rows = []
    for line in store.lines():
        rows.append(CartRow(
            name=line.name,
            price_text=f"{money(line.price)} each",
            qty=line.qty,
            on_decrease=_bind(store.decrement, line.name, on_change),
            on_increase=_bind(store.increment, line.name, on_change),
        ))
    return CartView(rows=rows, count=store.count, total_text=money(store.total), empty=not rows)


def _bind(mutate: Callable[[str], None], name: str, after: Callable[[], Any]) -> Callable[[], None]:
    def handler() -> None:
        mutate(name)
        after()
    return handler


class CartDrawer:
    def __init__(self):
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def handle_key(self, key: str) -> None:
        if key == "Escape":
            self.close()


class CartUI:
    def __init__(self, store: CartStore, drawer: Optional[CartDrawer] = None,
                 on_render: Optional[Callable[[CartView], Any]] = None):
        self.store = store
        self.drawer = drawer or CartDrawer()
        self.on_render = on_render
        self.view = CartView()
        self.render()

    def render(self) -> CartView:
        self.view = render_cart(self.store, self.render)
        if self.on_render is not None:
            self.on_render(self.view)
        return self.view

    def add_to_cart(self, name: Any, price: Any) -> bool:
        if not self.store.add(name, price):
            return False
        self.render()
        self.drawer.open()
        return True


@dataclass
class ProductButton:
    identifier: str
    price: Any
    handler: Callable[[], Any]

    def click(self) -> Any:
        return self.handler()


class ProductRegistry:
    """Explicit list of "add to cart" buttons, one per product."""

    def __init__(self, ui: CartUI):
        self.ui = ui
        self._buttons: dict[str, ProductButton] = {}

    def register(self, identifier: str, price: Any,
                 handler: Optional[Callable[[], Any]] = None) -> ProductButton:
        if handler is None:
            def handler():
                return self.ui.add_to_cart(identifier, price)
        button = ProductButton(identifier=identifier, price=price, handler=handler)
        self._buttons[identifier] = button
        return button

    def click(self, identifier: str) -> Any:
        button = self._buttons.get(identifier)
        if button is None:
            return None
        return button.click()

    def buttons(self) -> list[ProductButton]:
        return list(self._buttons.values())
