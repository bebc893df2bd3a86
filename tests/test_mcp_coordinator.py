"""Tests for the MCP Coordinator: fan-out, timeouts, ranking and failure isolation."""

import threading
import time
from typing import List, Optional

import pytest
from unittest.mock import MagicMock

from contracts import (
    KnowledgeItem,
    KnowledgeRequest,
    KnowledgeSource,
    KnowledgeType,
    SourceStatus,
)
from librarian import MCPCoordinator, rank_items
from providers import KnowledgeProvider, MemoryProvider


def make_item(item_id: str, source: KnowledgeSource, relevance: float) -> KnowledgeItem:
    return KnowledgeItem(
        id=item_id,
        source=source,
        type=KnowledgeType.INSIGHT,
        title=item_id,
        relevance_score=relevance,
    )


class FakeProvider(KnowledgeProvider):
    """Provider returning canned items, optionally after a delay or with an error."""

    def __init__(
        self,
        source: KnowledgeSource,
        items: Optional[List] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        timeout_seconds: float = 1.0,
        enabled: bool = True,
    ):
        super().__init__(timeout_seconds=timeout_seconds, enabled=enabled)
        self._source = source
        self.items = items or []
        self.delay = delay
        self.error = error
        self.calls = 0
        self.release = threading.Event()

    @property
    def source(self) -> KnowledgeSource:
        return self._source

    def fetch(self, request: KnowledgeRequest) -> List[KnowledgeItem]:
        self.calls += 1
        if self.delay:
            # Wait on an event so the test can release stuck threads
            self.release.wait(self.delay)
        if self.error:
            raise self.error
        return list(self.items)


def make_request(sources=None, max_results=20) -> KnowledgeRequest:
    return KnowledgeRequest(
        project_id="p1",
        business_request="Improve API performance",
        domain="software development",
        sources=set(KnowledgeSource) if sources is None else sources,
        max_results=max_results,
    )


class TestRankItems:
    """Test the ordering rule."""

    def test_relevance_descending(self):
        items = [
            make_item("low", KnowledgeSource.CONTEXT7, 0.2),
            make_item("high", KnowledgeSource.MEMORY, 0.9),
        ]
        assert [i.id for i in rank_items(items, 10)] == ["high", "low"]

    def test_tie_broken_by_source_priority(self):
        items = [
            make_item("m", KnowledgeSource.MEMORY, 0.5),
            make_item("w", KnowledgeSource.WEBSEARCH, 0.5),
            make_item("c", KnowledgeSource.CONTEXT7, 0.5),
        ]
        assert [i.id for i in rank_items(items, 10)] == ["c", "w", "m"]

    def test_tie_broken_by_arrival(self):
        items = [
            make_item("first", KnowledgeSource.MEMORY, 0.5),
            make_item("second", KnowledgeSource.MEMORY, 0.5),
        ]
        assert [i.id for i in rank_items(items, 10)] == ["first", "second"]

    def test_truncates(self):
        items = [make_item(str(i), KnowledgeSource.MEMORY, i / 10) for i in range(10)]
        ranked = rank_items(items, 3)
        assert [i.id for i in ranked] == ["9", "8", "7"]
        assert rank_items(items, 0) == []


class TestGatherKnowledge:
    """Test the concurrent fan-out."""

    def test_no_active_sources_makes_no_calls(self):
        provider = FakeProvider(KnowledgeSource.CONTEXT7, [make_item("a", KnowledgeSource.CONTEXT7, 0.5)])
        coordinator = MCPCoordinator(providers={KnowledgeSource.CONTEXT7: provider})
        report = coordinator.gather_with_report(make_request(sources=set()))
        assert report.items == []
        assert provider.calls == 0
        assert all(status == SourceStatus.DISABLED for status in report.statuses.values())

    def test_disabled_provider_is_skipped(self):
        provider = FakeProvider(KnowledgeSource.MEMORY, [make_item("a", KnowledgeSource.MEMORY, 0.5)], enabled=False)
        coordinator = MCPCoordinator(providers={KnowledgeSource.MEMORY: provider})
        assert coordinator.gather_knowledge(make_request()) == []
        assert provider.calls == 0

    def test_unrequested_source_not_called(self):
        context7 = FakeProvider(KnowledgeSource.CONTEXT7, [make_item("c", KnowledgeSource.CONTEXT7, 0.5)])
        memory = FakeProvider(KnowledgeSource.MEMORY, [make_item("m", KnowledgeSource.MEMORY, 0.5)])
        coordinator = MCPCoordinator(providers={KnowledgeSource.CONTEXT7: context7, KnowledgeSource.MEMORY: memory})
        items = coordinator.gather_knowledge(make_request(sources={KnowledgeSource.MEMORY}))
        assert [i.id for i in items] == ["m"]
        assert context7.calls == 0

    def test_merges_and_ranks_across_sources(self):
        coordinator = MCPCoordinator(providers={
            KnowledgeSource.CONTEXT7: FakeProvider(KnowledgeSource.CONTEXT7, [make_item("c", KnowledgeSource.CONTEXT7, 0.7)]),
            KnowledgeSource.WEBSEARCH: FakeProvider(KnowledgeSource.WEBSEARCH, [make_item("w", KnowledgeSource.WEBSEARCH, 0.9)]),
            KnowledgeSource.MEMORY: FakeProvider(KnowledgeSource.MEMORY, [make_item("m", KnowledgeSource.MEMORY, 0.7)]),
        })
        report = coordinator.gather_with_report(make_request())
        assert [i.id for i in report.items] == ["w", "c", "m"]
        assert all(status == SourceStatus.ACTIVE for status in report.statuses.values())
        assert report.integration_time_ms >= 0

    def test_max_results_respected(self):
        items = [make_item(f"m{i}", KnowledgeSource.MEMORY, 0.5) for i in range(10)]
        coordinator = MCPCoordinator(providers={KnowledgeSource.MEMORY: FakeProvider(KnowledgeSource.MEMORY, items)})
        assert len(coordinator.gather_knowledge(make_request(max_results=4))) == 4

    def test_failing_provider_contributes_nothing(self):
        coordinator = MCPCoordinator(providers={
            KnowledgeSource.CONTEXT7: FakeProvider(KnowledgeSource.CONTEXT7, error=RuntimeError("down")),
            KnowledgeSource.MEMORY: FakeProvider(KnowledgeSource.MEMORY, [make_item("m", KnowledgeSource.MEMORY, 0.5)]),
        })
        report = coordinator.gather_with_report(make_request())
        assert [i.id for i in report.items] == ["m"]
        assert report.statuses[KnowledgeSource.CONTEXT7] == SourceStatus.ERROR
        assert coordinator.error_count(KnowledgeSource.CONTEXT7) == 1

    def test_slow_provider_times_out_within_bound(self):
        slow = FakeProvider(KnowledgeSource.WEBSEARCH, [make_item("w", KnowledgeSource.WEBSEARCH, 0.9)], delay=5.0, timeout_seconds=0.2)
        fast = FakeProvider(KnowledgeSource.MEMORY, [make_item("m", KnowledgeSource.MEMORY, 0.5)], timeout_seconds=0.2)
        coordinator = MCPCoordinator(providers={KnowledgeSource.WEBSEARCH: slow, KnowledgeSource.MEMORY: fast})
        try:
            started = time.monotonic()
            report = coordinator.gather_with_report(make_request())
            elapsed = time.monotonic() - started
        finally:
            slow.release.set()
        assert elapsed < 1.0
        assert [i.id for i in report.items] == ["m"]
        assert report.statuses[KnowledgeSource.WEBSEARCH] == SourceStatus.TIMEOUT

    def test_providers_run_concurrently(self):
        providers = {
            source: FakeProvider(source, [make_item(source.value, source, 0.5)], delay=0.3, timeout_seconds=2.0)
            for source in KnowledgeSource
        }
        coordinator = MCPCoordinator(providers=providers)
        started = time.monotonic()
        items = coordinator.gather_knowledge(make_request())
        elapsed = time.monotonic() - started
        assert len(items) == 3
        assert elapsed < 0.8

    def test_malformed_items_dropped(self):
        raw = [
            {"id": "good", "source": "memory", "type": "lesson", "title": "ok", "relevanceScore": 0.5},
            {"id": "bad", "source": "memory", "type": "lesson", "title": "bad", "relevanceScore": 7},
        ]
        coordinator = MCPCoordinator(providers={KnowledgeSource.MEMORY: FakeProvider(KnowledgeSource.MEMORY, raw)})
        assert [i.id for i in coordinator.gather_knowledge(make_request())] == ["good"]


class TestServiceHealth:
    """Test availability checks."""

    def test_reports_each_provider(self):
        broken = FakeProvider(KnowledgeSource.CONTEXT7)
        broken.is_available = MagicMock(side_effect=RuntimeError("no route"))
        coordinator = MCPCoordinator(providers={
            KnowledgeSource.CONTEXT7: broken,
            KnowledgeSource.MEMORY: FakeProvider(KnowledgeSource.MEMORY),
        })
        health = {h.source: h for h in coordinator.get_service_health()}
        assert health[KnowledgeSource.CONTEXT7].is_available is False
        assert health[KnowledgeSource.MEMORY].is_available is True


class TestLessons:
    """Test lesson storage and assumption validation."""

    def test_store_lesson_without_memory_is_noop(self):
        coordinator = MCPCoordinator(providers={})
        assert coordinator.store_lessons_learned("devops", "slow deploys", "blue-green", "success") is False

    def test_stored_lesson_is_found_later(self):
        memory = MemoryProvider(seed=False)
        coordinator = MCPCoordinator(providers={KnowledgeSource.MEMORY: memory})
        assert coordinator.store_lessons_learned(
            "software development",
            "Checkout latency",
            "Cache product lookups",
            "success",
            project_id="p1",
            problem_class="performance",
        )
        items = coordinator.gather_knowledge(make_request(sources={KnowledgeSource.MEMORY}))
        titles = [i.title for i in items]
        assert "Checkout latency Resolution" in titles

    def test_validate_assumptions_uses_web_search(self):
        web = FakeProvider(KnowledgeSource.WEBSEARCH, [make_item("w", KnowledgeSource.WEBSEARCH, 0.8)])
        memory = FakeProvider(KnowledgeSource.MEMORY, [make_item("m", KnowledgeSource.MEMORY, 0.8)])
        coordinator = MCPCoordinator(providers={KnowledgeSource.WEBSEARCH: web, KnowledgeSource.MEMORY: memory})
        evidence = coordinator.validate_assumptions(["Users want SSO", "Mobile first"], "saas")
        assert set(evidence) == {"Users want SSO", "Mobile first"}
        assert web.calls == 2
        assert memory.calls == 0
