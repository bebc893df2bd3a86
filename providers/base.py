"""Base knowledge provider interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from config import settings
from contracts import KnowledgeItem, KnowledgeRequest, KnowledgeSource


# Keywords used to pick documentation topics out of a business request
TECH_KEYWORDS = ["API", "database", "authentication", "security", "performance", "monitoring"]

# Problem classes used to look up lessons and patterns
PROBLEM_KEYWORDS = ["scalability", "performance", "security", "integration", "deployment"]


def extract_topics(business_request: str, domain: str, limit: int = 3) -> List[str]:
    """Domain first, then any known technology keyword found in the request."""
    topics = [domain]
    request_lower = business_request.lower()
    for keyword in TECH_KEYWORDS:
        if keyword.lower() in request_lower:
            topics.append(keyword)
    return topics[:limit]


def extract_problems(business_request: str) -> List[str]:
    """Known problem classes mentioned in the request, or 'implementation'."""
    request_lower = business_request.lower()
    problems = [p for p in PROBLEM_KEYWORDS if p in request_lower]
    return problems or ["implementation"]


class KnowledgeProvider(ABC):
    """Abstract base class for knowledge providers.

    A provider answers a KnowledgeRequest with KnowledgeItems. It may raise;
    the coordinator isolates failures per provider.
    """

    def __init__(self, timeout_seconds: Optional[float] = None, enabled: bool = True):
        self.timeout_seconds = timeout_seconds or settings.adapter_timeout_seconds
        self.enabled = enabled

    @property
    @abstractmethod
    def source(self) -> KnowledgeSource:
        """Which source this provider represents."""
        pass

    @abstractmethod
    def fetch(self, request: KnowledgeRequest) -> List[KnowledgeItem]:
        """Retrieve knowledge for a request.

        Args:
            request: The knowledge request

        Returns:
            Items in the provider's own order
        """
        pass

    def is_available(self) -> bool:
        """Check if this provider can currently be reached."""
        return self.enabled
