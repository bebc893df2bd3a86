"""MCP Coordinator: concurrent knowledge gathering across providers.

Fans a KnowledgeRequest out to every enabled provider at once, waits for all
of them to settle (each against its own timeout), then merges and ranks the
results. A failing or slow provider contributes nothing; it never fails the
request.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from config import settings, SOURCE_PRIORITY
from contracts import (
    KnowledgeItem,
    KnowledgeReport,
    KnowledgeRequest,
    KnowledgeSource,
    ServiceHealth,
    SourceStatus,
)
from contracts.errors import AdapterFailure, AdapterTimeoutError
from providers import KnowledgeProvider, Lesson, MemoryProvider, build_default_providers

logger = logging.getLogger(__name__)


def _priority(source: KnowledgeSource) -> int:
    return SOURCE_PRIORITY.get(source.value, len(SOURCE_PRIORITY))


def rank_items(items: Sequence[KnowledgeItem], max_results: int) -> List[KnowledgeItem]:
    """Sort by relevance (desc), then source priority, then arrival order; keep max_results."""
    indexed = sorted(
        enumerate(items),
        key=lambda pair: (-pair[1].relevance_score, _priority(pair[1].source), pair[0]),
    )
    return [item for _, item in indexed[:max_results]]


class MCPCoordinator:
    """Coordinates the knowledge providers for the orchestration engine."""

    def __init__(
        self,
        providers: Optional[Dict[KnowledgeSource, KnowledgeProvider]] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize the coordinator.

        Args:
            providers: Provider per source. Defaults to one of each, built from settings.
            max_workers: Thread cap for one fan-out. Must be at least the number of
                         sources queried together, or the timeout bound no longer holds.
        """
        self.providers: Dict[KnowledgeSource, KnowledgeProvider] = (
            dict(providers) if providers is not None else build_default_providers()
        )
        self.max_workers = max_workers or settings.max_concurrent_adapters
        self._health_lock = threading.Lock()
        self._error_counts: Dict[KnowledgeSource, int] = {s: 0 for s in KnowledgeSource}

    def active_providers(self, sources: Iterable[KnowledgeSource]) -> List[KnowledgeProvider]:
        """Requested providers that exist and are enabled, in source-priority order."""
        wanted = set(sources)
        active = [
            provider
            for source, provider in self.providers.items()
            if source in wanted and provider.enabled
        ]
        return sorted(active, key=lambda p: _priority(p.source))

    def gather_knowledge(self, request: KnowledgeRequest) -> List[KnowledgeItem]:
        """Gather ranked knowledge for a request. Never raises for provider errors."""
        return self.gather_with_report(request).items

    def gather_with_report(self, request: KnowledgeRequest) -> KnowledgeReport:
        """Gather knowledge and report how each source behaved.

        Returns:
            KnowledgeReport with ranked items, per-source status and elapsed ms
        """
        started = time.monotonic()
        statuses: Dict[KnowledgeSource, SourceStatus] = {s: SourceStatus.DISABLED for s in KnowledgeSource}
        active = self.active_providers(request.sources)
        if not active:
            return KnowledgeReport(statuses=statuses)

        collected: List[KnowledgeItem] = []
        executor = ThreadPoolExecutor(
            max_workers=min(len(active), self.max_workers),
            thread_name_prefix="knowledge",
        )
        try:
            futures = [(provider, executor.submit(provider.fetch, request)) for provider in active]
            for provider, future in futures:
                try:
                    raw_items = self._await(provider, future, started)
                except AdapterTimeoutError as e:
                    future.cancel()
                    statuses[provider.source] = SourceStatus.TIMEOUT
                    self._record_error(provider.source)
                    logger.warning("Knowledge source timed out: %s", e)
                except AdapterFailure as e:
                    statuses[provider.source] = SourceStatus.ERROR
                    self._record_error(provider.source)
                    logger.warning("Knowledge source failed: %s", e)
                else:
                    statuses[provider.source] = SourceStatus.ACTIVE
                    collected.extend(self._validate_items(provider.source, raw_items))
        finally:
            # A timed-out fetch keeps its worker until the provider call returns;
            # providers bound their own I/O by timeout_seconds
            executor.shutdown(wait=False, cancel_futures=True)

        ranked = rank_items(collected, request.max_results)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug(
            "Gathered %d/%d knowledge item(s) from %d source(s) in %.0fms",
            len(ranked), len(collected), len(active), elapsed_ms,
        )
        return KnowledgeReport(items=ranked, statuses=statuses, integration_time_ms=elapsed_ms)

    def _await(self, provider: KnowledgeProvider, future: Future, started: float) -> list:
        """Wait for one provider until its own deadline (measured from fan-out start)."""
        remaining = provider.timeout_seconds - (time.monotonic() - started)
        try:
            return future.result(timeout=max(0.0, remaining))
        except FutureTimeout:
            raise AdapterTimeoutError(provider.source.value, provider.timeout_seconds)
        except Exception as e:
            raise AdapterFailure(provider.source.value, e) from e

    def _validate_items(self, source: KnowledgeSource, raw_items) -> List[KnowledgeItem]:
        items = []
        for raw in raw_items or []:
            try:
                item = raw if isinstance(raw, KnowledgeItem) else KnowledgeItem.model_validate(raw)
            except PydanticValidationError as e:
                logger.warning("Dropping malformed item from %s: %s", source.value, e.errors()[0].get("msg"))
                continue
            items.append(item)
        return items

    def _record_error(self, source: KnowledgeSource) -> None:
        with self._health_lock:
            self._error_counts[source] = self._error_counts.get(source, 0) + 1

    def error_count(self, source: KnowledgeSource) -> int:
        with self._health_lock:
            return self._error_counts.get(source, 0)

    def get_service_health(self, timeout_seconds: Optional[float] = None) -> List[ServiceHealth]:
        """Check every registered provider concurrently."""
        if not self.providers:
            return []
        timeout = timeout_seconds or settings.adapter_timeout_seconds
        checks: List[ServiceHealth] = []
        executor = ThreadPoolExecutor(max_workers=len(self.providers), thread_name_prefix="health")
        try:
            started = time.monotonic()
            futures = [(p, executor.submit(p.is_available)) for p in self.providers.values()]
            for provider, future in futures:
                remaining = timeout - (time.monotonic() - started)
                try:
                    available = bool(future.result(timeout=max(0.0, remaining)))
                except FutureTimeout:
                    available = False
                except Exception as e:
                    logger.warning("Health check failed for %s: %s", provider.source.value, e)
                    available = False
                checks.append(
                    ServiceHealth(
                        source=provider.source,
                        is_available=available,
                        response_time_ms=(time.monotonic() - started) * 1000,
                        error_count=self.error_count(provider.source),
                    )
                )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return checks

    def store_lessons_learned(
        self,
        domain: str,
        problem: str,
        solution: str,
        outcome: str,
        project_id: Optional[str] = None,
        problem_class: Optional[str] = None,
    ) -> bool:
        """Record a lesson in the memory provider.

        Returns:
            True if a memory provider stored it, False if there is none
        """
        memory = self.providers.get(KnowledgeSource.MEMORY)
        if not isinstance(memory, MemoryProvider):
            return False
        succeeded = outcome == "success"
        memory.store_lesson(
            Lesson(
                title=f"{problem} Resolution",
                domain=domain,
                problem=problem_class or problem,
                solution=solution,
                outcome=outcome,
                tags=[domain.lower(), (problem_class or problem).lower(), outcome],
                project_id=project_id,
                applicability=0.8 if succeeded else 0.6,
                confidence=0.9 if succeeded else 0.7,
            )
        )
        return True

    def validate_assumptions(self, assumptions: List[str], domain: str, project_id: str = "assumptions") -> Dict[str, List[KnowledgeItem]]:
        """Search the web for evidence on each assumption."""
        evidence: Dict[str, List[KnowledgeItem]] = {}
        for assumption in assumptions:
            evidence[assumption] = self.gather_knowledge(
                KnowledgeRequest(
                    project_id=project_id,
                    business_request=f"{assumption} in {domain}",
                    domain=domain,
                    sources={KnowledgeSource.WEBSEARCH},
                    max_results=3,
                )
            )
        return evidence
