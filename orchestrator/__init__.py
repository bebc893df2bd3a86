"""Orchestrator module for Smart Orchestrate execution control."""

from typing import Dict, List, Optional

from contracts import ExternalSources, OrchestrationRequest, PartialBusinessContext, WorkflowResult
from .context_broker import BusinessContextBroker
from .business_value import BusinessValueScorer, HeuristicValueScorer
from .run_metrics import RunMetrics, MergeRecord
from .orchestration_engine import OrchestrationEngine
from .tool import SMART_ORCHESTRATE_TOOL, handle_smart_orchestrate, get_default_engine


def run_orchestration(
    request: str,
    workflow: Optional[str] = None,
    role: Optional[str] = None,
    quality_level: Optional[str] = None,
    project_id: Optional[str] = None,
    goals: Optional[List[str]] = None,
    requirements: Optional[List[str]] = None,
    enrich: bool = False,
    sources: Optional[Dict[str, bool]] = None,
    skip_phases: Optional[List[str]] = None,
    timeout_seconds: Optional[float] = None,
    engine: Optional[OrchestrationEngine] = None,
) -> WorkflowResult:
    """Convenience function to run one orchestration.

    Args:
        request: Free-text business request
        workflow: Template name (project, feature, bugfix, sdlc, quality)
        role: Pin every phase to this role
        quality_level: basic, standard, high or enterprise
        project_id: Existing project to continue; a new one is created if omitted
        goals: Business goals to seed the context with
        requirements: Requirements to seed the context with
        enrich: Gather external knowledge for every phase
        sources: Overrides for use_context7 / use_web_search / use_memory
        skip_phases: Phase ids to leave out
        timeout_seconds: Overall run deadline
        engine: Engine to use (defaults to the shared one)

    Returns:
        WorkflowResult for the run
    """
    options: Dict[str, object] = {"cost_prevention": enrich}
    if quality_level:
        options["quality_level"] = quality_level
    if skip_phases:
        options["skip_phases"] = skip_phases
    if timeout_seconds:
        options["timeout_seconds"] = timeout_seconds
    if project_id or goals or requirements:
        options["business_context"] = PartialBusinessContext(
            project_id=project_id,
            business_goals=goals or [],
            requirements=requirements or [],
        ).model_dump(exclude_none=True)

    payload: Dict[str, object] = {
        "request": request,
        "options": options,
        "external_sources": ExternalSources(**(sources or {})).model_dump(),
    }
    if workflow:
        payload["workflow"] = workflow
    if role:
        payload["role"] = role
    return (engine or get_default_engine()).orchestrate(payload)


__all__ = [
    "BusinessContextBroker",
    "BusinessValueScorer",
    "HeuristicValueScorer",
    "RunMetrics",
    "MergeRecord",
    "OrchestrationEngine",
    "SMART_ORCHESTRATE_TOOL",
    "handle_smart_orchestrate",
    "get_default_engine",
    "run_orchestration",
    "OrchestrationRequest",
]
