"""Request and response contracts for the smart_orchestrate tool."""

from pydantic import Field, field_validator
from typing import Dict, List, Optional, Set
from datetime import datetime, timezone

from config import settings
from .base import WireModel
from .context_contracts import BusinessContext, PartialBusinessContext
from .knowledge_contracts import KnowledgeItem, KnowledgeSource
from .workflow_contracts import (
    Phase,
    PhaseResult,
    QualityLevel,
    RoleName,
    WorkflowStatus,
)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ExternalSources(WireModel):
    """Which knowledge sources a run may query."""
    use_context7: bool = True
    use_web_search: bool = True
    use_memory: bool = True

    def enabled_sources(self) -> Set[KnowledgeSource]:
        """Return the sources switched on by this selection."""
        enabled = set()
        if self.use_context7:
            enabled.add(KnowledgeSource.CONTEXT7)
        if self.use_web_search:
            enabled.add(KnowledgeSource.WEBSEARCH)
        if self.use_memory:
            enabled.add(KnowledgeSource.MEMORY)
        return enabled


class OrchestrationOptions(WireModel):
    """Tuning knobs for one orchestration run."""
    quality_level: QualityLevel = Field(
        default_factory=lambda: QualityLevel(settings.default_quality_level)
    )
    cost_prevention: bool = Field(default=False, description="Enable external knowledge enrichment")
    business_context: Optional[PartialBusinessContext] = None
    skip_phases: List[str] = Field(default_factory=list, description="Phase ids to leave out")
    focus_areas: List[str] = Field(default_factory=list)
    timeout_seconds: Optional[float] = Field(default=None, gt=0.0, description="Overall run deadline")
    max_knowledge_results: Optional[int] = Field(default=None, ge=1)


class OrchestrationRequest(WireModel):
    """Input to OrchestrationEngine.orchestrate."""
    request: str = Field(..., description="Free-text business request")
    workflow: str = Field(default_factory=lambda: settings.default_workflow)
    role: Optional[RoleName] = Field(default=None, description="Pin every phase to this role")
    options: OrchestrationOptions = Field(default_factory=OrchestrationOptions)
    external_sources: ExternalSources = Field(default_factory=ExternalSources)

    @field_validator("request")
    @classmethod
    def request_not_blank(cls, value: str) -> str:
        value = value.strip()
        if len(value) < settings.min_request_length:
            raise ValueError(
                f"request must be at least {settings.min_request_length} non-blank character(s)"
            )
        return value

    @field_validator("workflow")
    @classmethod
    def normalise_workflow(cls, value: str) -> str:
        return value.strip().lower()


class BusinessValue(WireModel):
    """Numeric business value estimates produced by the value scorer."""
    cost_prevention: float = Field(0.0, ge=0.0)
    time_saved: float = Field(0.0, ge=0.0, description="Hours")
    quality_improvement: float = Field(0.0, ge=0.0)
    risk_mitigation: float = Field(0.0, ge=0.0)
    strategic_alignment: float = Field(0.0, ge=0.0)
    user_satisfaction: float = Field(0.0, ge=0.0)


class TechnicalMetrics(WireModel):
    """Timing and accuracy metrics for one run (times in ms)."""
    response_time: float = 0.0
    orchestration_time: float = 0.0
    role_transition_time: float = 0.0
    context_preservation_accuracy: float = Field(0.0, ge=0.0, le=1.0)
    business_alignment_score: float = Field(0.0, ge=0.0, le=100.0)
    context_merges: int = 0
    phase_success_rate: float = Field(0.0, ge=0.0, le=1.0)


class NextStep(WireModel):
    """Recommended follow-up action."""
    step: str
    role: RoleName
    estimated_time: str
    priority: str = "medium"


class ExternalIntegration(WireModel):
    """How the knowledge sources behaved during the run."""
    context7_status: str = "disabled"
    web_search_status: str = "disabled"
    memory_status: str = "disabled"
    integration_time: float = 0.0


class WorkflowSummary(WireModel):
    """The phase plan and how far the run got."""
    template: str
    phases: List[Phase] = Field(default_factory=list)
    status: WorkflowStatus
    current_phase_index: int = 0
    phase_results: List[PhaseResult] = Field(default_factory=list)


class WorkflowResult(WireModel):
    """Output of OrchestrationEngine.orchestrate."""
    success: bool
    orchestration_id: Optional[str] = None
    workflow: Optional[WorkflowSummary] = None
    business_context: Optional[BusinessContext] = None
    business_value: Optional[BusinessValue] = None
    technical_metrics: Optional[TechnicalMetrics] = None
    next_steps: List[NextStep] = Field(default_factory=list)
    external_integration: Optional[ExternalIntegration] = None
    external_knowledge: List[KnowledgeItem] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None
    timestamp: str = Field(default_factory=_utc_timestamp)
