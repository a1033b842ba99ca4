"""Contract tests for any EvidenceStore implementation."""

from abc import ABC, abstractmethod

from support_reply.domain.evidence import (
    MIN_SIMILARITY,
    SAMPLE_HISTORICAL_RESPONSES,
    EvidenceStore,
    HistoricalResponse,
)


class EvidenceStoreContract(ABC):

    @abstractmethod
    def create_store(self) -> EvidenceStore:
        """An empty store."""
        ...

    def _seeded(self) -> EvidenceStore:
        store = self.create_store()
        store.add(SAMPLE_HISTORICAL_RESPONSES)
        return store

    def test_empty_store(self):
        store = self.create_store()
        assert store.count() == 0
        assert store.search("where is my order?") == []

    def test_add_then_count(self):
        assert self._seeded().count() == len(SAMPLE_HISTORICAL_RESPONSES)

    def test_add_same_id_replaces(self):
        store = self._seeded()
        store.add([HistoricalResponse("sample-1", "new query", "new response", "ORDER_STATUS")])
        assert store.count() == len(SAMPLE_HISTORICAL_RESPONSES)

    def test_exact_query_is_top_result(self):
        store = self._seeded()
        results = store.search("My glasses arrived broken. What should I do?")
        assert results
        assert results[0].id == "sample-2"
        assert results[0].similarity > 0.9

    def test_results_are_above_similarity_floor(self):
        store = self._seeded()
        for r in store.search("How can I return my glasses? They don't fit properly."):
            assert r.similarity > MIN_SIMILARITY
            assert r.similarity <= 1.0

    def test_results_sorted_and_limited(self):
        store = self._seeded()
        store.add([
            HistoricalResponse(f"dup-{i}", "Where is my order?", f"Reply {i}", "ORDER_STATUS")
            for i in range(5)
        ])
        results = store.search("Where is my order?", k=3)
        assert len(results) == 3
        sims = [r.similarity for r in results]
        assert sims == sorted(sims, reverse=True)

    def test_unrelated_text_finds_nothing(self):
        store = self._seeded()
        assert store.search("zebra xylophone quantum") == []
