from support_reply.domain.evidence import (
    EvidenceResponse,
    EvidenceStore,
    HistoricalResponse,
    relevant_evidence,
)


class SimulatorEvidenceStore(EvidenceStore):
    """
    In-memory fake for testing.

    Similarity is the share of the stored query's words that also appear in
    the search text, so an exact repeat scores 1.0 and unrelated text 0.0.
    """

    def __init__(self, records: list[HistoricalResponse] | None = None):
        self._records: dict[str, HistoricalResponse] = {}
        self.add(records or [])

    @staticmethod
    def _similarity(query_text: str, stored_query: str) -> float:
        wanted = set(stored_query.lower().split())
        if not wanted:
            return 0.0
        return len(wanted & set(query_text.lower().split())) / len(wanted)

    def search(self, query_text: str, k: int = 3) -> list[EvidenceResponse]:
        scored = [
            EvidenceResponse(
                query=r.query,
                response=r.response,
                similarity=self._similarity(query_text, r.query),
                category=r.category,
                id=r.id,
            )
            for r in self._records.values()
        ]
        scored.sort(key=lambda r: r.similarity, reverse=True)
        return relevant_evidence(scored)[: max(0, k)]

    def add(self, records: list[HistoricalResponse]) -> None:
        for r in records:
            self._records[r.id] = r

    def count(self) -> int:
        return len(self._records)
