"""Run metrics recorder for one orchestration run.

Collects stage timings and context merge bookkeeping while the engine runs,
then turns them into TechnicalMetrics for the result.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from contracts import TechnicalMetrics


@dataclass
class MergeRecord:
    """Outcome of a single context merge attempt."""
    label: str
    succeeded: bool
    version: Optional[int] = None
    error: Optional[str] = None


class RunMetrics:
    """Stage timings and merge accounting for a single run. Not shared between runs."""

    def __init__(self):
        self.started = time.monotonic()
        self.stage_ms: Dict[str, float] = {}
        self.merges: List[MergeRecord] = []

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time a block; repeated stages accumulate."""
        started = time.monotonic()
        try:
            yield
        finally:
            elapsed = (time.monotonic() - started) * 1000
            self.stage_ms[name] = self.stage_ms.get(name, 0.0) + elapsed

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.started) * 1000

    def record_merge(self, label: str, version: Optional[int] = None, error: Optional[BaseException] = None) -> None:
        self.merges.append(
            MergeRecord(
                label=label,
                succeeded=error is None,
                version=version,
                error=str(error) if error is not None else None,
            )
        )

    @property
    def attempted_merges(self) -> int:
        return len(self.merges)

    @property
    def successful_merges(self) -> int:
        return sum(1 for m in self.merges if m.succeeded)

    @property
    def context_preservation_accuracy(self) -> float:
        """Successful merges over attempted merges (1.0 when nothing was attempted)."""
        if not self.merges:
            return 1.0
        return self.successful_merges / self.attempted_merges

    @staticmethod
    def business_alignment_score(requested_goals: List[str], final_goals: List[str]) -> float:
        """Percentage of requested goals present in the final goals.

        A goal counts as present if it appears verbatim or as a case-insensitive
        substring of any final goal.
        """
        if not requested_goals:
            return 100.0
        lowered = [g.lower() for g in final_goals]
        found = sum(
            1 for goal in requested_goals
            if goal in final_goals or any(goal.lower() in g for g in lowered)
        )
        return round(found / len(requested_goals) * 100, 2)

    def to_technical_metrics(
        self,
        requested_goals: List[str],
        final_goals: List[str],
        phase_success_rate: float,
    ) -> TechnicalMetrics:
        return TechnicalMetrics(
            response_time=round(self.elapsed_ms(), 3),
            orchestration_time=round(self.stage_ms.get("phases", 0.0), 3),
            role_transition_time=round(self.stage_ms.get("transitions", 0.0), 3),
            context_preservation_accuracy=self.context_preservation_accuracy,
            business_alignment_score=self.business_alignment_score(requested_goals, final_goals),
            context_merges=self.successful_merges,
            phase_success_rate=phase_success_rate,
        )

    def summary(self) -> Dict[str, object]:
        """Plain dict view for logs and the CLI."""
        return {
            "elapsed_ms": round(self.elapsed_ms(), 1),
            "stages_ms": {k: round(v, 1) for k, v in self.stage_ms.items()},
            "merges": {
                "attempted": self.attempted_merges,
                "succeeded": self.successful_merges,
            },
        }
