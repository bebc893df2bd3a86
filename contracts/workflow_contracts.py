"""Workflow contracts: roles, phases, gate results and run state."""

from pydantic import Field
from typing import Dict, List, Optional
from enum import Enum
from datetime import datetime

from .base import WireModel


class RoleName(str, Enum):
    """Fixed set of roles a phase can be assigned to."""
    DEVELOPER = "developer"
    DESIGNER = "designer"
    QA_ENGINEER = "qa-engineer"
    OPERATIONS_ENGINEER = "operations-engineer"
    PRODUCT_STRATEGIST = "product-strategist"


class QualityLevel(str, Enum):
    """Requested rigour for quality gates."""
    BASIC = "basic"
    STANDARD = "standard"
    HIGH = "high"
    ENTERPRISE = "enterprise"


class WorkflowStatus(str, Enum):
    """Lifecycle of one orchestration run."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class PhaseStatus(str, Enum):
    """Lifecycle of one phase."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class GateOutcome(str, Enum):
    """Result of a quality gate."""
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class Task(WireModel):
    """A task descriptor; opaque to the engine, consumed by role agents."""
    id: str
    name: str
    description: str = ""
    deliverables: List[str] = Field(default_factory=list)
    estimated_minutes: int = Field(default=0, ge=0)
    dependencies: List[str] = Field(default_factory=list)


class Phase(WireModel):
    """A role-scoped unit of work within a run."""
    id: str
    name: str
    role: RoleName
    description: str = ""
    tools: List[str] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    blocking: bool = Field(default=False, description="A failed gate on this phase fails the run")
    status: PhaseStatus = PhaseStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class TaskReport(WireModel):
    """Status reported by a role agent after running a phase's tasks."""
    success: bool = True
    deliverables: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)
    notes: Dict[str, str] = Field(default_factory=dict)


class QualityGateResult(WireModel):
    """Verdict of a quality gate for one phase."""
    outcome: GateOutcome
    metrics: Dict[str, float] = Field(default_factory=dict, description="Gate metric name to 0-100 score")
    threshold: float = Field(0.0, ge=0.0, le=100.0)
    issues: List[str] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.outcome == GateOutcome.PASS


class PhaseResult(WireModel):
    """What happened when a phase ran."""
    phase_id: str
    phase: str
    role: RoleName
    success: bool
    blocking: bool = False
    deliverables: List[str] = Field(default_factory=list)
    gate: Optional[QualityGateResult] = None
    duration_ms: float = 0.0
    knowledge_items: int = 0
    issues: List[str] = Field(default_factory=list)


class WorkflowState(WireModel):
    """Mutable state of one orchestration run. Never shared between runs."""
    orchestration_id: str
    workflow: str
    phases: List[Phase] = Field(default_factory=list)
    current_phase_index: int = Field(default=0, ge=0)
    status: WorkflowStatus = WorkflowStatus.PENDING
    phase_results: List[PhaseResult] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in (WorkflowStatus.COMPLETED, WorkflowStatus.FAILED)
