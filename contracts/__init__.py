"""Pydantic contracts for the Smart Orchestrate system.

Every hand-off between the engine, the broker, the coordinator and the tool
boundary is typed through these contracts.
"""

from .base import WireModel

from .context_contracts import (
    MarketContext,
    SuccessCriteria,
    BusinessContext,
    PartialBusinessContext,
    RoleTransition,
    ContextValidation,
    ContextInsights,
)

from .knowledge_contracts import (
    KnowledgeSource,
    KnowledgeType,
    RequestPriority,
    SourceStatus,
    KnowledgeRequest,
    KnowledgeItem,
    KnowledgeReport,
    ServiceHealth,
)

from .workflow_contracts import (
    RoleName,
    QualityLevel,
    WorkflowStatus,
    PhaseStatus,
    GateOutcome,
    Task,
    Phase,
    TaskReport,
    QualityGateResult,
    PhaseResult,
    WorkflowState,
)

from .orchestration_contracts import (
    ExternalSources,
    OrchestrationOptions,
    OrchestrationRequest,
    BusinessValue,
    TechnicalMetrics,
    NextStep,
    ExternalIntegration,
    WorkflowSummary,
    WorkflowResult,
)

from .errors import (
    OrchestrationError,
    ValidationError,
    NotFoundError,
    AdapterFailure,
    AdapterTimeoutError,
    QualityGateFailure,
    OrchestrationTimeout,
)

__all__ = [
    "WireModel",
    # Business context
    "MarketContext",
    "SuccessCriteria",
    "BusinessContext",
    "PartialBusinessContext",
    "RoleTransition",
    "ContextValidation",
    "ContextInsights",
    # Knowledge
    "KnowledgeSource",
    "KnowledgeType",
    "RequestPriority",
    "SourceStatus",
    "KnowledgeRequest",
    "KnowledgeItem",
    "KnowledgeReport",
    "ServiceHealth",
    # Workflow
    "RoleName",
    "QualityLevel",
    "WorkflowStatus",
    "PhaseStatus",
    "GateOutcome",
    "Task",
    "Phase",
    "TaskReport",
    "QualityGateResult",
    "PhaseResult",
    "WorkflowState",
    # Orchestration
    "ExternalSources",
    "OrchestrationOptions",
    "OrchestrationRequest",
    "BusinessValue",
    "TechnicalMetrics",
    "NextStep",
    "ExternalIntegration",
    "WorkflowSummary",
    "WorkflowResult",
    # Errors
    "OrchestrationError",
    "ValidationError",
    "NotFoundError",
    "AdapterFailure",
    "AdapterTimeoutError",
    "QualityGateFailure",
    "OrchestrationTimeout",
]
