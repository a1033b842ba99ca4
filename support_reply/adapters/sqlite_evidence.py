"""
SQLite adapter for EvidenceStore.

Historical queries are embedded as hashed bag-of-words vectors and compared
by cosine similarity.  Good enough for a few thousand records; the search is
a linear scan.

Use ":memory:" for tests, a file path for production.
"""

import hashlib
import json
import math
import re
import sqlite3

from support_reply.domain.evidence import (
    EvidenceResponse,
    EvidenceStore,
    HistoricalResponse,
    relevant_evidence,
)

EMBEDDING_DIM = 256

_SCHEMA = """
CREATE TABLE IF NOT EXISTS historical_responses (
    id          TEXT PRIMARY KEY,
    query       TEXT NOT NULL,
    response    TEXT NOT NULL,
    category    TEXT NOT NULL,
    embedding   TEXT NOT NULL
);
"""

_TOKEN = re.compile(r"[a-z0-9]+")


def embed(text: str, dim: int = EMBEDDING_DIM) -> list[float]:
    """Unit-length hashed bag-of-words vector."""
    vec = [0.0] * dim
    for tok in _TOKEN.findall(text.lower()):
        idx = int(hashlib.sha256(tok.encode("utf-8")).hexdigest(), 16) % dim
        vec[idx] += 1.0
    norm = math.sqrt(sum(v * v for v in vec))
    if norm == 0:
        return vec
    return [v / norm for v in vec]


def cosine(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class SqliteEvidenceStore(EvidenceStore):

    def __init__(self, db_path: str = "support.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    def search(self, query_text: str, k: int = 3) -> list[EvidenceResponse]:
        vec = embed(query_text)
        rows = self._conn.execute("SELECT * FROM historical_responses").fetchall()

        scored = [
            EvidenceResponse(
                query=row["query"],
                response=row["response"],
                # float error can push identical vectors a hair past 1
                similarity=min(1.0, cosine(vec, json.loads(row["embedding"]))),
                category=row["category"],
                id=row["id"],
            )
            for row in rows
        ]
        scored.sort(key=lambda r: r.similarity, reverse=True)
        return relevant_evidence(scored)[: max(0, k)]

    def add(self, records: list[HistoricalResponse]) -> None:
        self._conn.executemany(
            "INSERT OR REPLACE INTO historical_responses"
            " (id, query, response, category, embedding) VALUES (?, ?, ?, ?, ?)",
            [
                (r.id, r.query, r.response, r.category, json.dumps(embed(r.query)))
                for r in records
            ],
        )
        self._conn.commit()

    def count(self) -> int:
        row = self._conn.execute("SELECT COUNT(*) FROM historical_responses").fetchone()
        return row[0]
