from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load env vars
load_dotenv()

DEFAULT_ORIGINS = (
    "http://localhost:5500",
    "http://127.0.0.1:5500",
)


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_list(*keys: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return tuple(part.strip() for part in v.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    resend_api_key: str = ""
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    from_email: str = ""
    to_email: str = ""
    client_url: str = "http://localhost:5500"
    allowed_origins: tuple[str, ...] = field(default=DEFAULT_ORIGINS)
    store_name: str = "Alyssa Loops"
    currency: str = "usd"
    shipping_countries: tuple[str, ...] = ("US",)
    port: int = 3000
    log_level: str = "INFO"

    @property
    def sender(self) -> str:
        return f"{self.store_name} <{self.from_email}>"


def load_settings() -> Settings:
    return Settings(
        resend_api_key=_get_env("RESEND_API_KEY", default="") or "",
        stripe_secret_key=_get_env("STRIPE_SECRET_KEY", default="") or "",
        stripe_webhook_secret=_get_env("STRIPE_WEBHOOK_SECRET", default="") or "",
        from_email=_get_env("FROM_EMAIL", default="") or "",
        to_email=_get_env("TO_EMAIL", default="") or "",
        client_url=(_get_env("CLIENT_URL", "DOMAIN", default="http://localhost:5500") or "").rstrip("/"),
        allowed_origins=_get_list("ALLOWED_ORIGINS", "CORS_ORIGINS", default=DEFAULT_ORIGINS),
        store_name=_get_env("STORE_NAME", default="Alyssa Loops") or "Alyssa Loops",
        currency=(_get_env("CURRENCY", default="usd") or "usd").lower(),
        shipping_countries=_get_list("SHIPPING_COUNTRIES", default=("US",)),
        port=_get_int("PORT", default=3000),
        log_level=(_get_env("LOG_LEVEL", default="INFO") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
