"""In-process memory provider: lessons learned and reusable patterns.

Lessons are added by finished orchestration runs and looked up by problem
class and domain on later runs. Nothing is persisted across processes.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
import uuid

from config import settings
from contracts import KnowledgeItem, KnowledgeRequest, KnowledgeSource, KnowledgeType
from .base import KnowledgeProvider, extract_problems


@dataclass
class Lesson:
    """A lesson learned from a previous project outcome."""
    title: str
    domain: str
    problem: str
    solution: str
    outcome: str  # success, failure or partial
    tags: List[str] = field(default_factory=list)
    project_id: Optional[str] = None
    applicability: float = 0.7
    confidence: float = 0.8
    id: str = field(default_factory=lambda: f"lesson-{uuid.uuid4().hex[:10]}")
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Pattern:
    """A reusable solution to a recurring problem class."""
    id: str
    name: str
    problem: str
    solution: str
    success_rate: float


SEED_LESSONS: List[Lesson] = [
    Lesson(
        id="sample-lesson-1",
        title="API Rate Limiting Best Practices",
        domain="software development",
        problem="performance",
        solution="Implement sliding window rate limiting with a shared store",
        outcome="success",
        tags=["api", "rate-limiting", "performance"],
        applicability=0.9,
        confidence=0.95,
    ),
]

PATTERNS: List[Pattern] = [
    Pattern("pattern-strangler", "Strangler Fig", "integration",
            "Route traffic through a facade and replace the legacy system piece by piece", 0.8),
    Pattern("pattern-cache-aside", "Cache-Aside", "performance",
            "Read through a cache and populate it on miss", 0.85),
    Pattern("pattern-horizontal-scale", "Stateless Horizontal Scaling", "scalability",
            "Keep request handlers stateless and scale them behind a load balancer", 0.8),
    Pattern("pattern-defense-depth", "Defense in Depth", "security",
            "Layer independent controls so a single failure does not expose the system", 0.75),
    Pattern("pattern-blue-green", "Blue-Green Deployment", "deployment",
            "Deploy to an idle environment and switch traffic once it is verified", 0.8),
    Pattern("pattern-walking-skeleton", "Walking Skeleton", "implementation",
            "Ship a thin end-to-end slice first, then thicken it", 0.7),
]


class MemoryProvider(KnowledgeProvider):
    """Lessons learned and patterns held in process memory."""

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        enabled: Optional[bool] = None,
        max_lessons: Optional[int] = None,
        seed: bool = True,
    ):
        super().__init__(
            timeout_seconds=timeout_seconds,
            enabled=settings.memory_enabled if enabled is None else enabled,
        )
        self.max_lessons = max_lessons or settings.memory_max_lessons
        self._lock = threading.Lock()
        self._lessons: List[Lesson] = list(SEED_LESSONS) if seed else []

    @property
    def source(self) -> KnowledgeSource:
        return KnowledgeSource.MEMORY

    def store_lesson(self, lesson: Lesson) -> None:
        """Add a lesson; the oldest lessons are dropped past max_lessons."""
        with self._lock:
            self._lessons.append(lesson)
            if len(self._lessons) > self.max_lessons:
                del self._lessons[: len(self._lessons) - self.max_lessons]

    def lessons(self) -> List[Lesson]:
        with self._lock:
            return list(self._lessons)

    def find_lessons(self, domain: str, problem: str) -> List[Lesson]:
        """Lessons whose problem matches, or whose domain matches and tags mention the problem."""
        domain_lower = domain.lower()
        problem_lower = problem.lower()
        matches = []
        for lesson in self.lessons():
            if lesson.problem.lower() == problem_lower:
                matches.append(lesson)
            elif lesson.domain.lower() == domain_lower and problem_lower in (t.lower() for t in lesson.tags):
                matches.append(lesson)
        return matches

    def fetch(self, request: KnowledgeRequest) -> List[KnowledgeItem]:
        items: List[KnowledgeItem] = []
        seen: Dict[str, bool] = {}
        for problem in extract_problems(request.business_request)[:2]:
            for lesson in self.find_lessons(request.domain, problem):
                if lesson.id in seen:
                    continue
                seen[lesson.id] = True
                items.append(self._lesson_item(lesson))
            for pattern in PATTERNS:
                if pattern.problem == problem and pattern.id not in seen:
                    seen[pattern.id] = True
                    items.append(self._pattern_item(pattern))
        return items

    def _lesson_item(self, lesson: Lesson) -> KnowledgeItem:
        return KnowledgeItem(
            id=lesson.id,
            source=KnowledgeSource.MEMORY,
            type=KnowledgeType.LESSON,
            title=lesson.title,
            content=f"Problem: {lesson.problem}\nSolution: {lesson.solution}\nOutcome: {lesson.outcome}",
            relevance_score=lesson.applicability,
            metadata={
                "domain": lesson.domain,
                "outcome": lesson.outcome,
                "tags": lesson.tags,
                "confidence": lesson.confidence,
                "project_id": lesson.project_id,
            },
        )

    def _pattern_item(self, pattern: Pattern) -> KnowledgeItem:
        return KnowledgeItem(
            id=pattern.id,
            source=KnowledgeSource.MEMORY,
            type=KnowledgeType.PATTERN,
            title=pattern.name,
            content=f"{pattern.solution}\nSuccess rate: {round(pattern.success_rate * 100)}%",
            relevance_score=pattern.success_rate,
            metadata={"problem": pattern.problem},
        )
