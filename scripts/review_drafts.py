#!/usr/bin/env python3
"""
Reviewer CLI: list, approve, and reject replies held for human review.

Usage (from project root):
    python scripts/review_drafts.py                  # list pending reviews
    python scripts/review_drafts.py show 3           # show full response details
    python scripts/review_drafts.py ok 3             # approve response #3
    python scripts/review_drafts.py nok 3            # reject response #3 (interactive)
    python scripts/review_drafts.py escalated        # list escalated conversations
    python scripts/review_drafts.py history [N]      # last N conversations (default 20)
"""

import asyncio
import os
import sys
import textwrap

# Allow running as `python scripts/review_drafts.py` from project root.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from support_reply.adapters.sqlite_memory import SqliteReplyMemory

DB_PATH = os.environ.get("DB_PATH", "data/support.db")


def _wrap(text: str, width: int = 72, indent: str = "    ") -> str:
    return textwrap.fill(text, width=width, initial_indent=indent, subsequent_indent=indent)


async def list_pending(mem: SqliteReplyMemory) -> None:
    responses = await mem.get_pending_reviews()
    if not responses:
        print("No pending reviews.")
        return

    print(f"\n{'ID':>4}  {'Source':<10}  {'Conf':>4}  {'Draft':<5}  Preview")
    print("-" * 80)
    for r in responses:
        preview = r.response_text[:50].replace("\n", " ")
        has_draft = "yes" if r.draft_id else "no"
        print(f"{r.response_id:>4}  {r.source:<10}  {r.confidence:>4.2f}  {has_draft:<5}  {preview}...")
    print()


async def show_response(mem: SqliteReplyMemory, response_id: int) -> None:
    r = await mem.get_response(response_id)
    if not r:
        print(f"Response #{response_id} not found.")
        return

    conv = await mem.get_conversation(r.conversation_id)
    print(f"\n{'=' * 60}")
    print(f"  Response #{r.response_id}  |  {r.source}  |  conf={r.confidence:.2f}")
    if conv:
        print(f"  Customer: {conv.customer_name} <{conv.customer_email}>")
        print(f"  Conversation: {conv.status} / {conv.priority}")
        if conv.order_number:
            print(f"  Order: #{conv.order_number}")
    print(f"  E-mail: {r.message_id}")
    print(f"  Escalated: {r.escalated}  Sent: {r.sent}  Draft: {r.draft_id or '-'}")
    print(f"  Status: {r.verdict}")
    print(f"  Created: {r.created_at}")
    if r.reviewed_at:
        print(f"  Reviewed: {r.reviewed_at}")
    print(f"{'=' * 60}")
    print(f"\n{r.response_text}\n")
    if r.actual_message_sent:
        print(f"  Actually sent: {r.actual_message_sent}")
    if r.reviewer_comment:
        print(f"  Comment: {r.reviewer_comment}")
    print()


async def approve(mem: SqliteReplyMemory, response_id: int) -> None:
    r = await mem.get_response(response_id)
    if not r:
        print(f"Response #{response_id} not found.")
        return
    if r.verdict != "pending":
        print(f"Response #{response_id} already reviewed ({r.verdict}).")
        return

    await mem.review_response(response_id, "ok")
    print(f"Response #{response_id} approved.")


async def reject(mem: SqliteReplyMemory, response_id: int) -> None:
    r = await mem.get_response(response_id)
    if not r:
        print(f"Response #{response_id} not found.")
        return
    if r.verdict != "pending":
        print(f"Response #{response_id} already reviewed ({r.verdict}).")
        return

    print(f"\nResponse #{response_id} ({r.source}):")
    print(_wrap(r.response_text))
    print()

    actual = input("What did you actually send? (leave empty to skip): ").strip() or None
    comment = input("Why did you change it? (leave empty to skip): ").strip() or None

    await mem.review_response(response_id, "nok", actual, comment)
    print(f"Response #{response_id} rejected.")


async def list_conversations(mem: SqliteReplyMemory, escalated_only: bool, limit: int) -> None:
    if escalated_only:
        conversations = await mem.get_escalated_conversations()
    else:
        conversations = await mem.get_conversation_history(limit)
    if not conversations:
        print("No conversations.")
        return

    print(f"\n{'ID':>4}  {'Status':<10}  {'Priority':<8}  {'Order':<14}  Customer")
    print("-" * 80)
    for c in conversations:
        print(
            f"{c.conversation_id:>4}  {c.status:<10}  {c.priority:<8}  "
            f"{c.order_number or '-':<14}  {c.customer_email}"
        )
    print()


async def main() -> None:
    mem = SqliteReplyMemory(DB_PATH)

    if len(sys.argv) < 2:
        await list_pending(mem)
        return

    cmd = sys.argv[1]

    if cmd == "show" and len(sys.argv) >= 3:
        await show_response(mem, int(sys.argv[2]))
    elif cmd == "ok" and len(sys.argv) >= 3:
        await approve(mem, int(sys.argv[2]))
    elif cmd == "nok" and len(sys.argv) >= 3:
        await reject(mem, int(sys.argv[2]))
    elif cmd == "escalated":
        await list_conversations(mem, escalated_only=True, limit=0)
    elif cmd == "history":
        limit = int(sys.argv[2]) if len(sys.argv) >= 3 else 20
        await list_conversations(mem, escalated_only=False, limit=limit)
    else:
        print(__doc__)


if __name__ == "__main__":
    asyncio.run(main())
