"""
Core polling logic for the support auto-reply daemon.

Extracted from scripts/run.py so it can be imported and tested
without pulling in Claude or IMAP adapter dependencies.
"""

import logging
from dataclasses import dataclass, field

from support_reply.communication.ports import MailboxReader
from support_reply.pipeline import Pipeline

log = logging.getLogger(__name__)


@dataclass
class PollSummary:
    total_processed: int = 0
    successful: int = 0
    escalated: int = 0
    failed: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)   # (message_id, error)


async def poll_once(pipeline: Pipeline, mailbox: MailboxReader) -> PollSummary:
    """
    One poll cycle over the unread inbox.

    Every message is marked read whatever the outcome, so a message that
    keeps failing is not retried on every cycle.  One failing message never
    stops the rest of the batch.
    """
    summary = PollSummary()

    try:
        messages = await mailbox.list_unread()
    except Exception as exc:
        log.error("Failed to list unread messages: %s", exc)
        return summary

    summary.total_processed = len(messages)
    log.info("Found %d unread message(s)", len(messages))

    for message in messages:
        try:
            result = await pipeline.process_message(message)
            summary.successful += 1
            if result.escalated:
                summary.escalated += 1
            if result.action != "already_processed":
                log.debug(
                    "msg_id=%s action=%s: %s",
                    message.message_id, result.action, result.details[:60],
                )
        except Exception as exc:
            log.error("Pipeline error for message %s: %s", message.message_id, exc)
            summary.failed += 1
            summary.errors.append((message.message_id, str(exc)))

        try:
            await mailbox.mark_read(message.message_id)
        except Exception as exc:
            log.error("Failed to mark message %s read: %s", message.message_id, exc)

    log.info(
        "Poll done: %d processed, %d ok, %d escalated, %d failed",
        summary.total_processed, summary.successful, summary.escalated, summary.failed,
    )
    return summary
