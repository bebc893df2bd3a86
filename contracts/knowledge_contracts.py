"""Knowledge contracts for the external source fan-out."""

from pydantic import Field
from typing import Any, Dict, List, Set
from enum import Enum
from datetime import datetime, timezone

from .base import WireModel


class KnowledgeSource(str, Enum):
    """External knowledge providers reachable through the coordinator."""
    CONTEXT7 = "context7"
    WEBSEARCH = "websearch"
    MEMORY = "memory"


class KnowledgeType(str, Enum):
    """Kind of knowledge item."""
    DOCUMENTATION = "documentation"
    EXAMPLE = "example"
    BEST_PRACTICE = "best-practice"
    SEARCH = "search"
    TREND = "trend"
    LESSON = "lesson"
    PATTERN = "pattern"
    INSIGHT = "insight"


class RequestPriority(str, Enum):
    """Urgency attached to a knowledge request."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SourceStatus(str, Enum):
    """Outcome of one source during a fan-out."""
    ACTIVE = "active"
    DISABLED = "disabled"
    TIMEOUT = "timeout"
    ERROR = "error"


class KnowledgeRequest(WireModel):
    """A request for supplementary knowledge on behalf of one phase."""
    project_id: str = Field(..., min_length=1)
    business_request: str = Field(..., description="Original free-text business request")
    domain: str = Field(default="technology")
    priority: RequestPriority = RequestPriority.MEDIUM
    sources: Set[KnowledgeSource] = Field(default_factory=set, description="Sources the caller wants queried")
    max_results: int = Field(default=20, ge=0)


class KnowledgeItem(WireModel):
    """One piece of knowledge returned by a provider."""
    id: str = Field(..., min_length=1)
    source: KnowledgeSource
    type: KnowledgeType
    title: str
    content: str = ""
    relevance_score: float = Field(..., ge=0.0, le=1.0)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class KnowledgeReport(WireModel):
    """Items from a fan-out plus how each source behaved."""
    items: List[KnowledgeItem] = Field(default_factory=list)
    statuses: Dict[KnowledgeSource, SourceStatus] = Field(default_factory=dict)
    integration_time_ms: float = 0.0


class ServiceHealth(WireModel):
    """Availability snapshot for one provider."""
    source: KnowledgeSource
    is_available: bool
    response_time_ms: float = 0.0
    last_checked: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    error_count: int = 0
