"""Business value scoring for finished orchestration runs."""

from abc import ABC, abstractmethod
from typing import List

from contracts import BusinessContext, BusinessValue, PhaseResult


class BusinessValueScorer(ABC):
    """Turns a run's outcome into numeric business value estimates."""

    @abstractmethod
    def score(
        self,
        context: BusinessContext,
        phase_results: List[PhaseResult],
        role_transitions: int,
    ) -> BusinessValue:
        pass


class HeuristicValueScorer(BusinessValueScorer):
    """Estimates value from goal count, requirement count and role hand-overs.

    Cost prevention is scaled by the phase success rate, so a run that fails
    early claims little of it.
    """

    def score(
        self,
        context: BusinessContext,
        phase_results: List[PhaseResult],
        role_transitions: int,
    ) -> BusinessValue:
        goals = len(context.business_goals)
        requirements = len(context.requirements)
        succeeded = sum(1 for r in phase_results if r.success)
        success_rate = succeeded / len(phase_results) if phase_results else 0.0

        return BusinessValue(
            cost_prevention=round(min(50000, 5000 + goals * 2000 + role_transitions * 1000) * success_rate, 2),
            time_saved=round(min(20.0, 2 + goals * 0.5 + role_transitions * 0.3), 2),
            quality_improvement=min(100.0, 70 + goals * 2 + role_transitions),
            risk_mitigation=min(100.0, 60 + requirements * 3 + role_transitions * 2),
            strategic_alignment=min(100.0, 80 + goals * 1.5),
            user_satisfaction=min(100.0, 85 + goals + role_transitions * 0.5),
        )
