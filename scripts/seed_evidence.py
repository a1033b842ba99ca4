#!/usr/bin/env python3
"""
Load historical responses into the evidence store.

Usage (from project root):
    python scripts/seed_evidence.py                  # load the built-in samples
    python scripts/seed_evidence.py responses.json   # load a JSON list of
                                                     # {id, query, response, category}
"""

import json
import os
import sys

# Allow running as `python scripts/seed_evidence.py` from project root.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from support_reply.adapters.sqlite_evidence import SqliteEvidenceStore
from support_reply.domain.evidence import SAMPLE_HISTORICAL_RESPONSES, HistoricalResponse

DB_PATH = os.environ.get("DB_PATH", "data/support.db")


def _load(path: str) -> list[HistoricalResponse]:
    with open(path, encoding="utf-8") as f:
        rows = json.load(f)
    return [
        HistoricalResponse(
            id=str(row["id"]),
            query=row["query"],
            response=row["response"],
            category=row.get("category", "GENERAL"),
        )
        for row in rows
    ]


def main() -> None:
    records = _load(sys.argv[1]) if len(sys.argv) >= 2 else SAMPLE_HISTORICAL_RESPONSES

    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    store = SqliteEvidenceStore(DB_PATH)
    store.add(records)
    print(f"Loaded {len(records)} response(s); store now holds {store.count()}.")


if __name__ == "__main__":
    main()
