"""Quality gates evaluated at the end of every phase.

Each gate returns a single verdict (pass, warning or fail) against the
requested quality level.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from config import settings, ROLE_QUALITY_GATES
from contracts import (
    BusinessContext,
    GateOutcome,
    Phase,
    QualityGateResult,
    QualityLevel,
    TaskReport,
)

logger = logging.getLogger(__name__)

BASE_SCORE = 70.0
MAX_CONTEXT_BONUS = 15.0
MAX_COMPLEXITY_BONUS = 10.0
COMPLETENESS_BONUS = 5.0


class QualityGate(ABC):
    """Judges a phase's output."""

    @abstractmethod
    def evaluate(
        self,
        phase: Phase,
        report: TaskReport,
        context: BusinessContext,
        quality_level: QualityLevel,
    ) -> QualityGateResult:
        pass


class ThresholdQualityGate(QualityGate):
    """Scores each of the role's gate metrics and compares with the level threshold.

    Score = 70 + context bonus + complexity bonus + completeness bonus, where:
    - context bonus rewards goals and requirements (up to 15)
    - complexity bonus rewards tool usage and a detailed description (up to 10)
    - completeness bonus is 5 when the phase declares tasks

    Pass at or above the threshold, warning within the warning band below it,
    fail otherwise. A failed task report always fails the gate.
    """

    def __init__(self, warning_band: Optional[float] = None):
        self.warning_band = settings.gate_warning_band if warning_band is None else warning_band

    def score(self, phase: Phase, context: BusinessContext) -> float:
        context_score = len(context.business_goals) * 10 + len(context.requirements) * 5
        context_bonus = min(MAX_CONTEXT_BONUS, context_score / 50 * MAX_CONTEXT_BONUS)

        complexity = len(phase.tools) * 5 + (10 if len(phase.description) > 100 else 0)
        complexity_bonus = min(MAX_COMPLEXITY_BONUS, complexity / 20 * MAX_COMPLEXITY_BONUS)

        completeness_bonus = COMPLETENESS_BONUS if phase.tasks else 0.0
        return min(100.0, BASE_SCORE + context_bonus + complexity_bonus + completeness_bonus)

    def evaluate(
        self,
        phase: Phase,
        report: TaskReport,
        context: BusinessContext,
        quality_level: QualityLevel,
    ) -> QualityGateResult:
        threshold = settings.threshold_for(quality_level.value)
        score = round(self.score(phase, context), 2)
        gate_names = ROLE_QUALITY_GATES.get(phase.role.value, ["overall"])
        metrics: Dict[str, float] = {name: score for name in gate_names}

        issues: List[str] = list(report.issues)
        if not report.success:
            outcome = GateOutcome.FAIL
            if not issues:
                issues.append(f"{phase.name} did not complete its tasks")
        elif score >= threshold:
            outcome = GateOutcome.PASS
        elif score >= threshold - self.warning_band:
            outcome = GateOutcome.WARNING
            issues.append(f"{phase.name} scored {score:.1f}, below the {quality_level.value} threshold of {threshold:.0f}")
        else:
            outcome = GateOutcome.FAIL
            issues.append(f"{phase.name} scored {score:.1f}, well below the {quality_level.value} threshold of {threshold:.0f}")

        logger.debug("Gate for %s: %s (score %.1f, threshold %.0f)", phase.name, outcome.value, score, threshold)
        return QualityGateResult(outcome=outcome, metrics=metrics, threshold=threshold, issues=issues)
