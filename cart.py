"""Client-side cart: name -> line mapping, written through to local storage."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Optional

from storage import MemoryStorage, Storage

log = logging.getLogger(__name__)

CART_KEY = "crochet_cart"


@dataclass
class CartLine:
    name: str
    price: float
    qty: int

    @property
    def subtotal(self) -> float:
        return self.price * self.qty


def _to_price(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        price = float(value.strip() or "0") if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


class CartStore:
    """Cart lines keyed by name.

    Every mutation is saved to ``storage`` under ``CART_KEY`` before it
    returns. A line never holds ``qty < 1``; decrementing past one removes it.
    """

    def __init__(self, storage: Optional[Storage] = None, key: str = CART_KEY):
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = key
        self._lines: dict[str, CartLine] = self._load()

    def _load(self) -> dict[str, CartLine]:
        raw = self.storage.get_item(self.key) or "{}"
        try:
            data = json.loads(raw)
        except ValueError:
            log.warning("stored cart under %r is corrupt, starting empty", self.key)
            return {}
        if not isinstance(data, dict):
            return {}

        lines = {}
        for name, item in data.items():
            if not isinstance(item, dict):
                continue
            price = _to_price(item.get("price"))
            try:
                qty = int(item.get("qty", 0))
            except (TypeError, ValueError, OverflowError):
                continue
            if price is None or qty < 1:
                continue
            # the storage key is the name the row handlers look lines up by
            lines[name] = CartLine(name=name, price=price, qty=qty)
        return lines

    def save(self) -> None:
        self.storage.set_item(self.key, json.dumps(self.to_dict()))

    def to_dict(self) -> dict[str, dict]:
        return {name: asdict(line) for name, line in self._lines.items()}

    # ---------------- mutations ----------------

    def add(self, name: Any, price: Any) -> bool:
        item_name = str(name if name is not None else "").strip()
        item_price = _to_price(price)
        if not item_name or item_price is None:
            return False

        line = self._lines.get(item_name)
        if line is None:
            line = self._lines[item_name] = CartLine(name=item_name, price=item_price, qty=0)
        line.qty += 1
        self.save()
        return True

    def increment(self, name: str) -> None:
        line = self._lines.get(name)
        if line is None:
            return
        line.qty += 1
        self.save()

    def decrement(self, name: str) -> None:
        line = self._lines.get(name)
        if line is None:
            return
        line.qty -= 1
        if line.qty <= 0:
            del self._lines[name]
        self.save()

    def clear(self) -> None:
        self._lines.clear()
        self.storage.remove_item(self.key)

    # ---------------- reads ----------------

    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get(self, name: str) -> Optional[CartLine]:
        return self._lines.get(name)

    @property
    def count(self) -> int:
        return sum(line.qty for line in self._lines.values())

    @property
    def total(self) -> float:
        return sum(line.subtotal for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, name: object) -> bool:
        return name in self._lines
