"""
Runtime settings, read once from the environment.

Mailbox credentials are read by communication/factory.py, next to the
adapter that needs them.
"""

import os
from dataclasses import dataclass

from support_reply.adapters.claude_generator import DEFAULT_MODEL
from support_reply.adapters.shopify_client import DEFAULT_API_VERSION

_TRUE = ("1", "true", "yes", "on")


def _flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE


@dataclass
class Settings:
    generation_model: str = DEFAULT_MODEL
    db_path: str = "data/support.db"
    poll_interval: int = 60
    confidence_threshold: float = 0.7
    auto_reply_enabled: bool = True
    auto_send_fallback: bool = True
    shopify_shop_domain: str | None = None
    shopify_access_token: str | None = None
    shopify_api_version: str = DEFAULT_API_VERSION

    @property
    def shopify_configured(self) -> bool:
        return bool(self.shopify_shop_domain and self.shopify_access_token)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            generation_model=os.environ.get("GENERATION_MODEL", DEFAULT_MODEL),
            db_path=os.environ.get("DB_PATH", "data/support.db"),
            poll_interval=int(os.environ.get("POLL_INTERVAL", "60")),
            confidence_threshold=float(os.environ.get("CONFIDENCE_THRESHOLD", "0.7")),
            auto_reply_enabled=_flag("AUTO_REPLY_ENABLED", True),
            auto_send_fallback=_flag("AUTO_SEND_FALLBACK", True),
            shopify_shop_domain=os.environ.get("SHOPIFY_SHOP_DOMAIN") or None,
            shopify_access_token=os.environ.get("SHOPIFY_ACCESS_TOKEN") or None,
            shopify_api_version=os.environ.get("SHOPIFY_API_VERSION", DEFAULT_API_VERSION),
        )
