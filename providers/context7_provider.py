"""Context7 documentation provider."""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from config import settings
from contracts import KnowledgeItem, KnowledgeRequest, KnowledgeSource, KnowledgeType
from .base import KnowledgeProvider, extract_topics

logger = logging.getLogger(__name__)


# Built-in guidance served when no Context7 credentials are configured
FALLBACK_PRACTICES: Dict[str, List[str]] = {
    "API": ["Version every public endpoint", "Validate input at the boundary"],
    "database": ["Use migrations for every schema change", "Index the columns you filter on"],
    "authentication": ["Hash passwords with a slow KDF", "Expire sessions server-side"],
    "security": ["Keep dependencies patched", "Apply least privilege to service accounts"],
    "performance": ["Measure before optimising", "Cache expensive reads close to the caller"],
    "monitoring": ["Alert on symptoms, not causes", "Emit structured logs with request ids"],
}


class Context7Provider(KnowledgeProvider):
    """Documentation lookups against the Context7 search API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        enabled: Optional[bool] = None,
        use_fallback: Optional[bool] = None,
    ):
        super().__init__(
            timeout_seconds=timeout_seconds,
            enabled=settings.context7_enabled if enabled is None else enabled,
        )
        self.base_url = (base_url or settings.context7_api_url).rstrip("/")
        self.api_key = settings.context7_api_key if api_key is None else api_key
        self.use_fallback = settings.knowledge_fallbacks if use_fallback is None else use_fallback

    @property
    def source(self) -> KnowledgeSource:
        return KnowledgeSource.CONTEXT7

    def is_available(self) -> bool:
        return self.enabled and (bool(self.api_key) or self.use_fallback)

    def fetch(self, request: KnowledgeRequest) -> List[KnowledgeItem]:
        topics = extract_topics(request.business_request, request.domain)
        if not self.api_key:
            if not self.use_fallback:
                raise RuntimeError("Context7 API key not set (SMART_ORCHESTRATE_CONTEXT7_API_KEY)")
            return self._fallback_items(topics)

        items: List[KnowledgeItem] = []
        # Both lookups share one timeout budget
        deadline = time.monotonic() + self.timeout_seconds
        for topic in topics[:2]:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug("Context7 budget spent before topic %r", topic)
                break
            for rank, result in enumerate(self._search(topic, remaining)):
                items.append(self._to_item(topic, rank, result))
        return items

    def _search(self, topic: str, timeout: float) -> List[Dict[str, Any]]:
        response = requests.get(
            f"{self.base_url}/v1/search",
            headers={"Authorization": f"Bearer {self.api_key}"},
            params={"query": topic},
            timeout=timeout,
        )
        response.raise_for_status()
        data = response.json()
        results = data.get("results", []) if isinstance(data, dict) else []
        return [r for r in results if isinstance(r, dict)]

    def _to_item(self, topic: str, rank: int, result: Dict[str, Any]) -> KnowledgeItem:
        trust = result.get("trustScore")
        if isinstance(trust, (int, float)):
            relevance = max(0.0, min(1.0, float(trust) / 10.0))
        else:
            relevance = max(0.1, 0.9 - rank * 0.1)
        library_id = result.get("id") or f"{topic}-{rank}"
        return KnowledgeItem(
            id=f"context7-{library_id}",
            source=KnowledgeSource.CONTEXT7,
            type=KnowledgeType.DOCUMENTATION,
            title=result.get("title") or topic,
            content=result.get("description") or "",
            relevance_score=relevance,
            metadata={"topic": topic, "library_id": library_id},
        )

    def _fallback_items(self, topics: List[str]) -> List[KnowledgeItem]:
        items = []
        for topic in topics:
            practices = FALLBACK_PRACTICES.get(topic)
            if not practices:
                continue
            items.append(
                KnowledgeItem(
                    id=f"context7-fallback-{topic.lower()}",
                    source=KnowledgeSource.CONTEXT7,
                    type=KnowledgeType.BEST_PRACTICE,
                    title=f"{topic} best practices",
                    content="\n".join(f"- {p}" for p in practices),
                    relevance_score=0.6,
                    metadata={"topic": topic, "fallback": True},
                )
            )
        logger.debug("Context7 fallback served %d item(s) for %s", len(items), topics)
        return items
