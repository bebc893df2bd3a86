"""Web search provider (Brave Search API shape)."""

import hashlib
import logging
from typing import Any, Dict, List, Optional

import requests

from config import settings
from contracts import KnowledgeItem, KnowledgeRequest, KnowledgeSource, KnowledgeType
from .base import KnowledgeProvider

logger = logging.getLogger(__name__)


# Curated trend notes served when no search credentials are configured
FALLBACK_TRENDS: List[Dict[str, str]] = [
    {
        "topic": "Shift-left quality",
        "description": "Teams move testing and security checks earlier in the delivery pipeline.",
    },
    {
        "topic": "Platform engineering",
        "description": "Internal platforms standardise deployment and observability for product teams.",
    },
]


def _stable_id(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:12]


class WebSearchProvider(KnowledgeProvider):
    """Web search results and trend notes."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        enabled: Optional[bool] = None,
        use_fallback: Optional[bool] = None,
        max_results: int = 5,
    ):
        super().__init__(
            timeout_seconds=timeout_seconds,
            enabled=settings.websearch_enabled if enabled is None else enabled,
        )
        self.api_url = api_url or settings.websearch_api_url
        self.api_key = settings.websearch_api_key if api_key is None else api_key
        self.use_fallback = settings.knowledge_fallbacks if use_fallback is None else use_fallback
        self.max_results = max_results

    @property
    def source(self) -> KnowledgeSource:
        return KnowledgeSource.WEBSEARCH

    def is_available(self) -> bool:
        return self.enabled and (bool(self.api_key) or self.use_fallback)

    def fetch(self, request: KnowledgeRequest) -> List[KnowledgeItem]:
        query = f"{request.business_request} {request.domain}"
        if not self.api_key:
            if not self.use_fallback:
                raise RuntimeError("Web search API key not set (SMART_ORCHESTRATE_WEBSEARCH_API_KEY)")
            return self._fallback_items(request.domain)
        return self.search(query, self.max_results)

    def search(self, query: str, count: int) -> List[KnowledgeItem]:
        """Run one search and map results to knowledge items."""
        response = requests.get(
            self.api_url,
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": self.api_key,
            },
            params={"q": query, "count": count},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        data = response.json()
        results = ((data or {}).get("web") or {}).get("results") or []
        return [self._to_item(rank, r) for rank, r in enumerate(results[:count]) if isinstance(r, dict)]

    def _to_item(self, rank: int, result: Dict[str, Any]) -> KnowledgeItem:
        url = result.get("url", "")
        return KnowledgeItem(
            id=f"websearch-{_stable_id(url or str(rank))}",
            source=KnowledgeSource.WEBSEARCH,
            type=KnowledgeType.SEARCH,
            title=result.get("title") or url,
            content=result.get("description") or "",
            relevance_score=max(0.1, 0.85 - rank * 0.1),
            metadata={"url": url, "age": result.get("age")},
        )

    def _fallback_items(self, domain: str) -> List[KnowledgeItem]:
        return [
            KnowledgeItem(
                id=f"websearch-trend-{_stable_id(trend['topic'])}",
                source=KnowledgeSource.WEBSEARCH,
                type=KnowledgeType.TREND,
                title=trend["topic"],
                content=trend["description"],
                relevance_score=0.5,
                metadata={"domain": domain, "fallback": True},
            )
            for trend in FALLBACK_TRENDS
        ]
