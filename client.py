"""Browser-side flows that talk to the API: contact form, checkout, newsletter."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from cart import CartStore
from scheduler import LoopScheduler

log = logging.getLogger(__name__)

API_BASE = "http://localhost:3000"
NOTE_CLEAR_DELAY = 3.5


class RequestFailed(Exception):
    pass


class Note:
    """Status line under a form; optionally wipes itself after a delay."""

    def __init__(self, scheduler):
        self.scheduler = scheduler
        self.text = ""
        self._timer = None

    def show(self, text: str, clear_after: Optional[float] = None) -> None:
        self.scheduler.cancel(self._timer)
        self._timer = None
        self.text = text
        if clear_after is not None:
            self._timer = self.scheduler.call_later(clear_after, self.clear)

    def clear(self) -> None:
        self._timer = None
        self.text = ""


@dataclass
class ContactForm:
    name: str = ""
    email: str = ""
    details: str = ""

    def reset(self) -> None:
        self.name = self.email = self.details = ""


@dataclass
class CheckoutButton:
    label: str = "Checkout"
    disabled: bool = False


class StorefrontClient:
    def __init__(self, store: CartStore, api_base: str = API_BASE, scheduler=None,
                 http: Optional[requests.Session] = None,
                 alert: Optional[Callable[[str], Any]] = None,
                 redirect: Optional[Callable[[str], Any]] = None):
        self.store = store
        self.api_base = api_base.rstrip("/")
        self.scheduler = scheduler or LoopScheduler()
        self.http = http or requests.Session()
        self.alert = alert or (lambda msg: log.warning("alert: %s", msg))
        self.redirect = redirect or (lambda url: log.info("redirecting to %s", url))

        self.form_note = Note(self.scheduler)
        self.newsletter_note = Note(self.scheduler)
        self.checkout_button = CheckoutButton()

    def _post(self, path: str, body: dict) -> dict:
        resp = self.http.post(f"{self.api_base}{path}", json=body)
        try:
            out = resp.json()
        except ValueError:
            out = {}
        if not isinstance(out, dict):
            out = {}
        if not resp.ok or not out.get("ok"):
            raise RequestFailed(out.get("error") or f"{path} returned {resp.status_code}")
        return out

    # ---------------- contact ----------------

    def submit_contact(self, form: ContactForm) -> bool:
        name = (form.name or "").strip()
        email = (form.email or "").strip()
        details = (form.details or "").strip()

        if not name or not email or not details:
            self.form_note.show("Please fill out all fields.")
            return False

        self.form_note.show("Sending…")
        try:
            self._post("/api/contact", {"name": name, "email": email, "details": details})
        except (requests.RequestException, RequestFailed) as e:
            log.error("contact form failed: %s", e)
            self.form_note.show("Couldn’t send. Is the server running?")
            return False

        self.form_note.show(f"Thanks, {name}! Message sent ✿", clear_after=NOTE_CLEAR_DELAY)
        form.reset()
        return True

    # ---------------- checkout ----------------

    def checkout(self) -> Optional[str]:
        if self.store.count == 0:
            self.alert("Your cart is empty!")
            return None

        self.checkout_button.disabled = True
        self.checkout_button.label = "Redirecting…"

        try:
            out = self._post("/api/create-checkout-session", {"cart": self.store.to_dict()})
            url = out.get("url")
            if not url:
                raise RequestFailed("Failed to start checkout")
        except (requests.RequestException, RequestFailed) as e:
            log.error("checkout failed: %s", e)
            self.alert("Couldn’t start Stripe checkout. Is the server running?")
            self.checkout_button.disabled = False
            self.checkout_button.label = "Checkout"
            return None

        self.redirect(url)
        return url

    # ---------------- newsletter (demo, nothing is sent) ----------------

    def subscribe_newsletter(self, email: str) -> bool:
        email = (email or "").strip()
        if not email or "@" not in email:
            self.newsletter_note.show("Please enter a valid email.")
            return False
        self.newsletter_note.show("Subscribed! (Demo — no email is actually sent.)", clear_after=NOTE_CLEAR_DELAY)
        return True
