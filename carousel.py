"""Rotating product turntable.

Cards sit on a ring, ``index`` is the card facing the viewer. The ring
auto-advances every ``AUTO_DELAY`` seconds unless the pointer or focus is
inside it.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cart_ui import ProductRegistry
from scheduler import FRAME, LoopScheduler

AUTO_DELAY = 2.6
TOUCH_RESUME_DELAY = 0.6
RESIZE_DEBOUNCE = 0.08
TRANSITION = "transform 650ms cubic-bezier(.2,.9,.2,1)"
RADIUS_OFFSET = 90
MIN_CARD_WIDTH = 320
MAX_CARD_WIDTH = 420
DEFAULT_CARD_WIDTH = 360


@dataclass
class Card:
    name: str
    price: Any
    width: Optional[float] = None


def compute_radius(card_width: Optional[float], n: int) -> int:
    w = max(MIN_CARD_WIDTH, min(card_width or DEFAULT_CARD_WIDTH, MAX_CARD_WIDTH))
    if n < 2:
        return RADIUS_OFFSET
    return math.floor((w / 2) / math.tan(math.pi / n) + 0.5) + RADIUS_OFFSET


class Carousel:
    def __init__(self, cards: list[Card], scheduler=None,
                 registry: Optional[ProductRegistry] = None,
                 measure: Optional[Callable[[], Optional[float]]] = None):
        if not cards:
            raise ValueError("carousel needs at least one card")
        self.cards = list(cards)
        self.n = len(self.cards)
        self.step = 360 / self.n
        self.scheduler = scheduler or LoopScheduler()
        self.measure = measure or (lambda: self.cards[0].width)

        self.index = 0
        self.radius = 0
        self.slide_transforms: list[str] = []
        self.ring_transform = ""
        self.ring_transition = TRANSITION
        self.dots: list[bool] = []

        self._auto_timer = None
        self._resize_timer = None
        self._touch_timer = None
        self._frame_timer = None

        if registry is not None:
            for card in self.cards:
                registry.register(card.name, card.price)

    # ---------------- lifecycle ----------------

    def mount(self) -> None:
        self.dots = [i == self.index for i in range(self.n)]
        self.layout()
        self.start_auto()

    def unmount(self) -> None:
        self.stop_auto()
        self.scheduler.cancel(self._resize_timer)
        self.scheduler.cancel(self._touch_timer)
        self.scheduler.cancel(self._frame_timer)
        self._resize_timer = self._touch_timer = self._frame_timer = None

    def layout(self) -> None:
        self.radius = compute_radius(self.measure(), self.n)
        self.slide_transforms = [
            f"translate(-50%, -50%) rotateY({format_deg(i * self.step)}deg) translateZ({self.radius}px)"
            for i in range(self.n)
        ]
        self.rotate_to(self.index, instant=True)

    # ---------------- navigation ----------------

    def rotate_to(self, i: int, instant: bool = False) -> None:
        self.index = i % self.n

        if instant:
            self.ring_transition = "none"
        self.ring_transform = f"rotateY({format_deg(-self.index * self.step)}deg)"
        if instant:
            self.scheduler.cancel(self._frame_timer)
            self._frame_timer = self.scheduler.call_later(FRAME, self._enable_transition)

        self.dots = [k == self.index for k in range(self.n)]

    def _enable_transition(self) -> None:
        self._frame_timer = None
        self.ring_transition = TRANSITION

    def next(self) -> None:
        self.rotate_to(self.index + 1)

    def prev(self) -> None:
        self.rotate_to(self.index - 1)

    def dot_click(self, i: int) -> None:
        self.rotate_to(i)

    def handle_key(self, key: str) -> None:
        if key == "ArrowLeft":
            self.prev()
        elif key == "ArrowRight":
            self.next()

    @property
    def active_card(self) -> Card:
        return self.cards[self.index]

    # ---------------- auto advance ----------------

    @property
    def auto_running(self) -> bool:
        return self._auto_timer is not None

    def start_auto(self) -> None:
        if self._auto_timer is not None:
            return
        self._auto_timer = self.scheduler.call_later(AUTO_DELAY, self._tick)

    def stop_auto(self) -> None:
        if self._auto_timer is None:
            return
        self.scheduler.cancel(self._auto_timer)
        self._auto_timer = None

    def _tick(self) -> None:
        self._auto_timer = None
        self.next()
        self.start_auto()

    pointer_enter = stop_auto
    pointer_leave = start_auto
    focus_in = stop_auto
    focus_out = start_auto

    def touch_start(self) -> None:
        self.scheduler.cancel(self._touch_timer)
        self._touch_timer = None
        self.stop_auto()

    def touch_end(self) -> None:
        self.scheduler.cancel(self._touch_timer)
        self._touch_timer = self.scheduler.call_later(TOUCH_RESUME_DELAY, self._resume_after_touch)

    def _resume_after_touch(self) -> None:
        self._touch_timer = None
        self.start_auto()

    def resize(self) -> None:
        self.scheduler.cancel(self._resize_timer)
        self._resize_timer = self.scheduler.call_later(RESIZE_DEBOUNCE, self._resized)

    def _resized(self) -> None:
        self._resize_timer = None
        self.layout()


def format_deg(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
