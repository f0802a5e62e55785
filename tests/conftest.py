"""Shared fixtures: fake clock, fake mailer, Flask test client, signed webhooks."""

import hashlib
import heapq
import hmac
import itertools
import json
import time

import pytest

from app import create_app
from config import Settings
from emails import EmailError

WEBHOOK_SECRET = "whsec_test_secret"


class ManualScheduler:
    """Scheduler whose clock only moves when a test calls ``advance``."""

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._cancelled = set()
        self._ids = itertools.count()

    def call_later(self, delay, fn):
        handle = next(self._ids)
        heapq.heappush(self._queue, (self.now + delay, handle, fn))
        return handle

    def cancel(self, handle):
        if handle is not None:
            self._cancelled.add(handle)

    @property
    def pending(self):
        return sum(1 for _, h, _ in self._queue if h not in self._cancelled)

    def advance(self, seconds):
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, handle, fn = heapq.heappop(self._queue)
            self.now = when
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            fn()
        self.now = target


class FakeMailer:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, message):
        if self.fail:
            raise EmailError("provider down")
        self.sent.append(message)
        return f"email_{len(self.sent)}"


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp=None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event(event_type: str, session: dict) -> bytes:
    return json.dumps({
        "id": "evt_test_001",
        "object": "event",
        "type": event_type,
        "data": {"object": session},
    }).encode("utf-8")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def settings():
    return Settings(
        resend_api_key="re_test",
        stripe_secret_key="sk_test_dummy",
        stripe_webhook_secret=WEBHOOK_SECRET,
        from_email="orders@shop.test",
        to_email="owner@shop.test",
        client_url="https://shop.test",
        allowed_origins=("https://shop.test",),
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(settings, mailer):
    app = create_app(settings, mailer=mailer)
    app.config["TESTING"] = True
    return app.test_client()
