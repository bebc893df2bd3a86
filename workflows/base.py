"""Workflow template building blocks.

A template is an ordered list of PhaseSpecs. Each orchestration run builds a
fresh list of Phase models from it, so no state is shared between runs.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from contracts import Phase, QualityLevel, RoleName, Task
from config import QUALITY_LEVEL_THRESHOLDS


@dataclass(frozen=True)
class TaskSpec:
    """Declared task within a phase."""
    key: str
    name: str
    description: str
    deliverables: Tuple[str, ...] = ()
    estimated_minutes: int = 30
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PhaseSpec:
    """Declared phase within a template.

    ``skip_below_quality`` leaves the phase out when the requested quality
    level ranks below it (e.g. QA is skipped at ``basic`` in the sdlc plan).
    ``description`` may contain ``{request}``.
    """
    key: str
    name: str
    role: RoleName
    description: str
    tools: Tuple[str, ...] = ()
    tasks: Tuple[TaskSpec, ...] = ()
    blocking: bool = False
    skip_below_quality: Optional[QualityLevel] = None


def _rank(level: QualityLevel) -> float:
    return QUALITY_LEVEL_THRESHOLDS[level.value]


@dataclass
class WorkflowTemplate:
    """A named, ordered phase plan."""
    name: str
    description: str
    phases: List[PhaseSpec] = field(default_factory=list)

    @property
    def phase_keys(self) -> List[str]:
        return [spec.key for spec in self.phases]

    def build_phases(
        self,
        request_text: str,
        role: Optional[RoleName] = None,
        quality_level: QualityLevel = QualityLevel.STANDARD,
        skip_phases: Iterable[str] = (),
    ) -> List[Phase]:
        """Build a fresh phase list for one run, in declared order.

        Args:
            request_text: The business request, substituted into descriptions
            role: If given, every phase is assigned to this role
            quality_level: Requested quality level; gates quality-dependent phases
            skip_phases: Phase keys to leave out

        Returns:
            New Phase models, all pending
        """
        skipped = set(skip_phases)
        phases: List[Phase] = []
        for spec in self.phases:
            if spec.key in skipped:
                continue
            if spec.skip_below_quality is not None and _rank(quality_level) < _rank(spec.skip_below_quality):
                continue
            phases.append(
                Phase(
                    id=spec.key,
                    name=spec.name,
                    role=role or spec.role,
                    description=spec.description.format(request=request_text),
                    tools=list(spec.tools),
                    tasks=[
                        Task(
                            id=f"task_{spec.key}_{task.key}",
                            name=task.name,
                            description=task.description,
                            deliverables=list(task.deliverables),
                            estimated_minutes=task.estimated_minutes,
                            dependencies=list(task.dependencies),
                        )
                        for task in spec.tasks
                    ],
                    blocking=spec.blocking,
                )
            )
        return phases
