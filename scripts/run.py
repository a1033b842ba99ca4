"""
Local process runner for the support auto-reply pipeline.

Polls the support inbox every POLL_INTERVAL seconds for unread customer
e-mails and answers each one through the pipeline: sent directly, or saved
as a draft for review with scripts/review_drafts.py.

Usage:
    source .env && python scripts/run.py

Environment variables (required unless noted):
    ANTHROPIC_API_KEY       - Anthropic/Claude API key
    GENERATION_MODEL        - model id (default: claude-haiku-4-5-20251001)
    MAILBOX_CHANNEL         - "imap" or "console" (default: console)
    POLL_INTERVAL           - seconds between polls (default: 60)
    DB_PATH                 - SQLite database path (default: data/support.db)
    CONFIDENCE_THRESHOLD    - escalation threshold (default: 0.7)
    AUTO_REPLY_ENABLED      - "false" drafts every reply (default: true)
    AUTO_SEND_FALLBACK      - send composer replies despite escalation (default: true)

    # Mailbox (only when MAILBOX_CHANNEL=imap)
    EMAIL_USER, EMAIL_PASSWORD, EMAIL_SMTP_HOST, EMAIL_SMTP_PORT,
    EMAIL_IMAP_HOST, EMAIL_IMAP_PORT, EMAIL_DRAFTS_FOLDER, UNREAD_BATCH_SIZE

    # Orders (optional; without them a simulator with no orders is used)
    SHOPIFY_SHOP_DOMAIN, SHOPIFY_ACCESS_TOKEN, SHOPIFY_API_VERSION
"""

import asyncio
import logging
import os
import sys

# Make sure project root is on sys.path when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from support_reply.adapters.claude_generator import ClaudeTextGenerator
from support_reply.adapters.shopify_client import ShopifyOrderClient
from support_reply.adapters.simulator_orders import SimulatorOrderLookup
from support_reply.adapters.sqlite_evidence import SqliteEvidenceStore
from support_reply.adapters.sqlite_memory import SqliteReplyMemory
from support_reply.communication.factory import create_mailbox
from support_reply.communication.ports import Mailbox
from support_reply.config import Settings
from support_reply.daemon import poll_once
from support_reply.domain.evidence import SAMPLE_HISTORICAL_RESPONSES
from support_reply.domain.orders import OrderLookup
from support_reply.pipeline import Pipeline, PipelineConfig
from support_reply.responder import ResponseGenerator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger(__name__)


def _require_env(name: str) -> str:
    value = os.environ.get(name)
    if not value:
        print(f"ERROR: environment variable {name!r} is not set.", file=sys.stderr)
        sys.exit(1)
    return value


def _order_lookup(settings: Settings) -> OrderLookup:
    if settings.shopify_configured:
        return ShopifyOrderClient(
            shop_domain=settings.shopify_shop_domain,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
        )
    log.warning("SHOPIFY_* not set, replies will be generated without order data")
    return SimulatorOrderLookup()


def build_pipeline(settings: Settings, mailbox: Mailbox) -> Pipeline:
    api_key = _require_env("ANTHROPIC_API_KEY")
    db_dir = os.path.dirname(settings.db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    evidence = SqliteEvidenceStore(db_path=settings.db_path)
    if evidence.count() == 0:
        evidence.add(SAMPLE_HISTORICAL_RESPONSES)
        log.info("Seeded evidence store with %d sample response(s)", evidence.count())

    config = PipelineConfig(
        mailbox=mailbox,
        orders=_order_lookup(settings),
        evidence=evidence,
        responder=ResponseGenerator(
            ClaudeTextGenerator(api_key=api_key, model=settings.generation_model),
            escalation_threshold=settings.confidence_threshold,
        ),
        memory=SqliteReplyMemory(db_path=settings.db_path),
        auto_reply_enabled=settings.auto_reply_enabled,
        auto_send_fallback=settings.auto_send_fallback,
    )
    return Pipeline(config)


async def main() -> None:
    settings = Settings.from_env()
    mailbox = create_mailbox()
    pipeline = build_pipeline(settings, mailbox)

    log.info(
        "Daemon started: interval=%ds  threshold=%.2f  auto_reply=%s",
        settings.poll_interval,
        settings.confidence_threshold,
        settings.auto_reply_enabled,
    )

    while True:
        await poll_once(pipeline, mailbox)
        log.info("Sleeping %ds …", settings.poll_interval)
        await asyncio.sleep(settings.poll_interval)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        log.info("Daemon stopped.")
