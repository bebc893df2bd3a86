"""Orchestration Engine: drives a business request through its workflow phases.

Each run:
1. Validates the request (nothing is touched on failure)
2. Seeds the project's business context through the broker
3. Builds the phase plan from the workflow template
4. Runs every phase in order: optional knowledge enrichment, role agent,
   quality gate, outcome merge, role hand-over
5. Assembles metrics, business value and next steps into a WorkflowResult
"""

import logging
import threading
import time
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from config import settings, ROLE_KNOWLEDGE_DOMAINS
from contracts import (
    BusinessContext,
    ExternalIntegration,
    GateOutcome,
    KnowledgeItem,
    KnowledgeRequest,
    KnowledgeSource,
    NextStep,
    OrchestrationRequest,
    PartialBusinessContext,
    Phase,
    PhaseResult,
    PhaseStatus,
    QualityGateResult,
    RequestPriority,
    RoleName,
    SourceStatus,
    TaskReport,
    WorkflowResult,
    WorkflowState,
    WorkflowStatus,
    WorkflowSummary,
)
from contracts.errors import (
    NotFoundError,
    OrchestrationTimeout,
    QualityGateFailure,
    ValidationError,
)
from agents import AgentRegistry, QualityGate, RoleAgent, ThresholdQualityGate
from librarian import MCPCoordinator, rank_items
from providers import extract_problems
from workflows import WorkflowTemplate, get_template
from .business_value import BusinessValueScorer, HeuristicValueScorer
from .context_broker import BusinessContextBroker
from .run_metrics import RunMetrics

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _RunContext:
    """Per-run bookkeeping that never leaves the engine."""

    def __init__(self, request: OrchestrationRequest, template: WorkflowTemplate, project_id: str, deadline: Optional[float], timeout: Optional[float]):
        self.request = request
        self.template = template
        self.project_id = project_id
        self.deadline = deadline
        self.timeout = timeout
        self.metrics = RunMetrics()
        self.warnings: List[str] = []
        self.knowledge: List[KnowledgeItem] = []
        self.source_statuses: Dict[KnowledgeSource, SourceStatus] = {s: SourceStatus.DISABLED for s in KnowledgeSource}
        self.integration_ms = 0.0
        self.transitions = 0


class OrchestrationEngine:
    """Phase state machine for smart_orchestrate runs.

    The engine is safe to share between threads: every run owns its own
    WorkflowState, and context changes are serialized per project by the broker.
    """

    def __init__(
        self,
        broker: Optional[BusinessContextBroker] = None,
        coordinator: Optional[MCPCoordinator] = None,
        agents: Optional[Union[AgentRegistry, Dict[RoleName, RoleAgent]]] = None,
        quality_gate: Optional[QualityGate] = None,
        value_scorer: Optional[BusinessValueScorer] = None,
    ):
        """Initialize the engine.

        Args:
            broker: Shared business context store
            coordinator: Knowledge coordinator used when enrichment is requested
            agents: Agent registry, or a role-to-agent mapping overriding the defaults
            quality_gate: Gate evaluated after every phase
            value_scorer: Strategy producing the business value block
        """
        self.broker = broker or BusinessContextBroker()
        self.coordinator = coordinator or MCPCoordinator()
        if isinstance(agents, AgentRegistry):
            self.agents = agents
        else:
            self.agents = AgentRegistry(agents)
        self.quality_gate = quality_gate or ThresholdQualityGate()
        self.value_scorer = value_scorer or HeuristicValueScorer()

        self._lock = threading.Lock()
        self._active: Dict[str, WorkflowState] = {}
        self._results: "OrderedDict[str, WorkflowResult]" = OrderedDict()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def orchestrate(self, request: Union[OrchestrationRequest, Dict[str, Any]]) -> WorkflowResult:
        """Run a business request through its workflow.

        Never raises; every failure, including one from an injected strategy,
        comes back as a WorkflowResult with success=False, an error and a
        timestamp.
        """
        try:
            parsed, template = self._validate(request)
        except ValidationError as e:
            logger.warning("Rejected orchestration request: %s", e)
            return WorkflowResult(success=False, error=str(e), error_type=type(e).__name__)

        orchestration_id = f"orchestration_{uuid.uuid4().hex[:12]}"
        seed = self._seed_context(parsed)
        timeout = parsed.options.timeout_seconds or settings.orchestration_timeout_seconds
        run = _RunContext(
            request=parsed,
            template=template,
            project_id=seed.project_id,
            deadline=time.monotonic() + timeout if timeout else None,
            timeout=timeout,
        )
        state = WorkflowState(orchestration_id=orchestration_id, workflow=template.name)
        with self._lock:
            self._active[orchestration_id] = state

        logger.info("[%s] Starting %s workflow for project %s", orchestration_id, template.name, run.project_id)
        error: Optional[Exception] = None
        try:
            self.broker.get_or_create(run.project_id)
            self._merge(run, seed, "seed")
            state.phases = template.build_phases(
                parsed.request,
                role=parsed.role,
                quality_level=parsed.options.quality_level,
                skip_phases=parsed.options.skip_phases,
            )
            state.status = WorkflowStatus.IN_PROGRESS
            with run.metrics.stage("phases"):
                self._run_phases(run, state)
            state.status = WorkflowStatus.COMPLETED
        except (NotFoundError, OrchestrationTimeout, QualityGateFailure) as e:
            state.status = WorkflowStatus.FAILED
            error = e
            logger.warning("[%s] Workflow failed: %s", orchestration_id, e)
        except Exception as e:
            state.status = WorkflowStatus.FAILED
            error = e
            logger.exception("[%s] Workflow aborted by an unexpected error", orchestration_id)
        finally:
            with self._lock:
                self._active.pop(orchestration_id, None)

        if parsed.options.cost_prevention and parsed.external_sources.use_memory:
            try:
                self._store_lesson(run, state)
            except Exception as e:
                logger.exception("[%s] Could not store lesson", orchestration_id)
                run.warnings.append(f"Lesson not stored: {type(e).__name__}: {e}")

        try:
            result = self._build_result(run, state, error)
        except Exception as e:
            logger.exception("[%s] Could not assemble the workflow result", orchestration_id)
            state.status = WorkflowStatus.FAILED
            result = WorkflowResult(
                success=False,
                orchestration_id=orchestration_id,
                warnings=run.warnings,
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
            )
        self._retain(orchestration_id, result)
        logger.info(
            "[%s] Finished with status %s (%d/%d phases succeeded)",
            orchestration_id,
            state.status.value,
            sum(1 for r in state.phase_results if r.success),
            len(state.phases),
        )
        return result

    def get_workflow_result(self, orchestration_id: str) -> Optional[WorkflowResult]:
        """Result of a finished run, or None if unknown."""
        with self._lock:
            result = self._results.get(orchestration_id)
        return result.model_copy(deep=True) if result is not None else None

    def active_workflows(self) -> List[WorkflowState]:
        """Snapshots of the runs currently in progress."""
        with self._lock:
            return [state.model_copy(deep=True) for state in self._active.values()]

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _validate(self, request: Union[OrchestrationRequest, Dict[str, Any]]):
        if isinstance(request, OrchestrationRequest):
            parsed = request
        else:
            try:
                parsed = OrchestrationRequest.model_validate(request)
            except PydanticValidationError as e:
                messages = [
                    f"{'.'.join(str(part) for part in err['loc']) or 'request'}: {err['msg']}"
                    for err in e.errors()
                ]
                raise ValidationError("Invalid orchestration request: " + "; ".join(messages), messages) from e
        try:
            template = get_template(parsed.workflow)
        except KeyError as e:
            raise ValidationError(e.args[0]) from e
        return parsed, template

    def _seed_context(self, request: OrchestrationRequest) -> PartialBusinessContext:
        supplied = request.options.business_context or PartialBusinessContext()
        return supplied.model_copy(
            update={
                "project_id": supplied.project_id or f"project_{uuid.uuid4().hex[:12]}",
                "business_goals": supplied.business_goals or [f"Implement: {request.request}"],
                "requirements": supplied.requirements or [request.request],
            },
            deep=True,
        )

    def _run_phases(self, run: _RunContext, state: WorkflowState) -> None:
        previous_role: Optional[RoleName] = None
        for index, phase in enumerate(state.phases):
            state.current_phase_index = index
            self._check_deadline(run, phase.name)

            if previous_role is not None and previous_role != phase.role:
                with run.metrics.stage("transitions"):
                    self.broker.record_transition(
                        run.project_id, previous_role.value, phase.role.value, state.orchestration_id
                    )
                    run.transitions += 1
            previous_role = phase.role

            result = self._run_phase(run, state, phase)
            state.phase_results.append(result)

            if not result.success:
                if phase.blocking or settings.blocking_by_default:
                    raise QualityGateFailure(phase.name, result.issues)
                run.warnings.append(f"Non-blocking phase '{phase.name}' failed its quality gate")
            elif result.gate is not None and result.gate.outcome == GateOutcome.WARNING:
                run.warnings.extend(result.gate.issues)

        state.current_phase_index = len(state.phases)

    def _run_phase(self, run: _RunContext, state: WorkflowState, phase: Phase) -> PhaseResult:
        started = time.monotonic()
        phase.status = PhaseStatus.RUNNING
        phase.started_at = _now()
        logger.info("[%s] Phase %s (%s)", state.orchestration_id, phase.name, phase.role.value)

        knowledge_count = 0
        if run.request.options.cost_prevention:
            knowledge_count = self._enrich(run, phase)

        # Step b: role agent works from a snapshot
        snapshot = self._snapshot(run)
        agent = self.agents.get(phase.role)
        try:
            report = agent.execute(phase, snapshot)
        except Exception as e:
            logger.exception("[%s] Agent %r raised during %s", state.orchestration_id, agent, phase.name)
            report = TaskReport(success=False, issues=[f"{type(e).__name__}: {e}"])

        # Step c: quality gate
        quality_level = run.request.options.quality_level
        try:
            gate = self.quality_gate.evaluate(phase, report, snapshot, quality_level)
        except Exception as e:
            logger.exception("[%s] Quality gate raised during %s", state.orchestration_id, phase.name)
            gate = QualityGateResult(
                outcome=GateOutcome.FAIL,
                threshold=settings.threshold_for(quality_level.value),
                issues=[f"Quality gate error: {type(e).__name__}: {e}"],
            )
        success = report.success and gate.outcome != GateOutcome.FAIL
        phase.status = PhaseStatus.COMPLETED if success else PhaseStatus.FAILED
        phase.completed_at = _now()

        # Step d: record the outcome
        self._merge(
            run,
            PartialBusinessContext(
                stakeholders=[phase.role.value],
                constraints={
                    "phases": {
                        phase.id: {
                            "name": phase.name,
                            "role": phase.role.value,
                            "success": success,
                            "gate": gate.outcome.value,
                            "deliverables": report.deliverables,
                            "orchestrationId": state.orchestration_id,
                        }
                    }
                },
            ),
            f"phase:{phase.id}",
        )

        issues = list(report.issues)
        for issue in gate.issues:
            if issue not in issues:
                issues.append(issue)
        return PhaseResult(
            phase_id=phase.id,
            phase=phase.name,
            role=phase.role,
            success=success,
            blocking=phase.blocking,
            deliverables=report.deliverables,
            gate=gate,
            duration_ms=round((time.monotonic() - started) * 1000, 3),
            knowledge_items=knowledge_count,
            issues=issues,
        )

    def _enrich(self, run: _RunContext, phase: Phase) -> int:
        """Gather knowledge for a phase and merge the summaries into the context."""
        context = self._snapshot(run)
        domain = ROLE_KNOWLEDGE_DOMAINS.get(phase.role.value, "technology")
        if context.market_context and context.market_context.industry:
            domain = context.market_context.industry
        request = KnowledgeRequest(
            project_id=run.project_id,
            business_request=f"{run.request.request} {' '.join(run.request.options.focus_areas)}".strip(),
            domain=domain,
            priority=RequestPriority.HIGH if phase.blocking else RequestPriority.MEDIUM,
            sources=run.request.external_sources.enabled_sources(),
            max_results=run.request.options.max_knowledge_results or settings.max_knowledge_results,
        )
        report = self.coordinator.gather_with_report(request)
        run.integration_ms += report.integration_time_ms
        for source, status in report.statuses.items():
            # Keep the best status seen across phases
            if run.source_statuses[source] != SourceStatus.ACTIVE and status != SourceStatus.DISABLED:
                run.source_statuses[source] = status

        if not report.items:
            return 0
        run.knowledge.extend(report.items)
        self._merge(
            run,
            PartialBusinessContext(
                constraints={
                    "knowledge": {
                        phase.id: [
                            {
                                "id": item.id,
                                "source": item.source.value,
                                "type": item.type.value,
                                "title": item.title,
                                "relevance": item.relevance_score,
                            }
                            for item in report.items
                        ]
                    }
                }
            ),
            f"knowledge:{phase.id}",
        )
        return len(report.items)

    def _merge(self, run: _RunContext, partial: PartialBusinessContext, label: str) -> BusinessContext:
        try:
            merged = self.broker.merge(run.project_id, partial)
        except NotFoundError as e:
            run.metrics.record_merge(label, error=e)
            raise
        run.metrics.record_merge(label, version=merged.version)
        return merged

    def _snapshot(self, run: _RunContext) -> BusinessContext:
        context = self.broker.snapshot(run.project_id)
        if context is None:
            raise NotFoundError(run.project_id)
        return context

    def _retain(self, orchestration_id: str, result: WorkflowResult) -> None:
        # Oldest results are dropped first
        with self._lock:
            self._results[orchestration_id] = result
            while len(self._results) > settings.max_retained_results:
                self._results.popitem(last=False)

    def _check_deadline(self, run: _RunContext, phase_name: Optional[str] = None) -> None:
        if run.deadline is not None and time.monotonic() > run.deadline:
            raise OrchestrationTimeout(run.timeout, phase_name)

    def _store_lesson(self, run: _RunContext, state: WorkflowState) -> None:
        succeeded = sum(1 for r in state.phase_results if r.success)
        if state.status == WorkflowStatus.COMPLETED and succeeded == len(state.phases):
            outcome = "success"
        elif succeeded:
            outcome = "partial"
        else:
            outcome = "failure"
        problem_class = extract_problems(run.request.request)[0]
        phase_names = ", ".join(r.phase for r in state.phase_results) or "no phases"
        self.coordinator.store_lessons_learned(
            domain=ROLE_KNOWLEDGE_DOMAINS[RoleName.DEVELOPER.value],
            problem=run.request.request[:120],
            solution=f"{run.template.name} workflow: {phase_names}",
            outcome=outcome,
            project_id=run.project_id,
            problem_class=problem_class,
        )

    # ------------------------------------------------------------------
    # Result assembly
    # ------------------------------------------------------------------

    def _build_result(self, run: _RunContext, state: WorkflowState, error: Optional[Exception]) -> WorkflowResult:
        context = self.broker.snapshot(run.project_id)
        final_goals = context.business_goals if context is not None else []
        requested_goals = (
            run.request.options.business_context.business_goals
            if run.request.options.business_context and run.request.options.business_context.business_goals
            else [f"Implement: {run.request.request}"]
        )
        phase_success_rate = (
            sum(1 for r in state.phase_results if r.success) / len(state.phase_results)
            if state.phase_results else 0.0
        )

        success = error is None and state.status == WorkflowStatus.COMPLETED
        business_value = (
            self.value_scorer.score(context, state.phase_results, run.transitions)
            if context is not None else None
        )
        knowledge = rank_items(
            list({item.id: item for item in run.knowledge}.values()),
            run.request.options.max_knowledge_results or settings.max_knowledge_results,
        )

        return WorkflowResult(
            success=success,
            orchestration_id=state.orchestration_id,
            workflow=WorkflowSummary(
                template=state.workflow,
                phases=state.phases,
                status=state.status,
                current_phase_index=state.current_phase_index,
                phase_results=state.phase_results,
            ),
            business_context=context,
            business_value=business_value,
            technical_metrics=run.metrics.to_technical_metrics(requested_goals, final_goals, phase_success_rate),
            next_steps=self._next_steps(success, state),
            external_integration=ExternalIntegration(
                context7_status=run.source_statuses[KnowledgeSource.CONTEXT7].value,
                web_search_status=run.source_statuses[KnowledgeSource.WEBSEARCH].value,
                memory_status=run.source_statuses[KnowledgeSource.MEMORY].value,
                integration_time=round(run.integration_ms, 3),
            ),
            external_knowledge=knowledge,
            warnings=run.warnings,
            error=(str(error) or type(error).__name__) if error is not None else None,
            error_type=type(error).__name__ if error is not None else None,
        )

    def _next_steps(self, success: bool, state: WorkflowState) -> List[NextStep]:
        steps: List[NextStep] = []
        if success:
            steps.append(NextStep(
                step="Monitor production deployment and user adoption",
                role=RoleName.OPERATIONS_ENGINEER,
                estimated_time="Ongoing",
                priority="high",
            ))
            steps.append(NextStep(
                step="Gather user feedback and identify improvement opportunities",
                role=RoleName.PRODUCT_STRATEGIST,
                estimated_time="2-4 weeks",
                priority="medium",
            ))
            steps.append(NextStep(
                step="Plan next iteration based on metrics and feedback",
                role=RoleName.PRODUCT_STRATEGIST,
                estimated_time="1 week",
                priority="medium",
            ))
        else:
            for result in state.phase_results:
                if not result.success:
                    issues = ", ".join(result.issues) or "Unknown issues"
                    steps.append(NextStep(
                        step=f"Address issues in {result.phase} phase: {issues}",
                        role=result.role,
                        estimated_time="1-2 days",
                        priority="high",
                    ))
            steps.append(NextStep(
                step="Review and update business requirements based on failures",
                role=RoleName.PRODUCT_STRATEGIST,
                estimated_time="2-3 days",
                priority="high",
            ))

        # Gate warnings (and non-blocking failures on a successful run)
        for result in state.phase_results:
            if result.gate is None:
                continue
            if result.gate.outcome == GateOutcome.WARNING or (success and not result.success):
                steps.append(NextStep(
                    step=f"Raise {result.phase} quality to the required level",
                    role=result.role,
                    estimated_time="1 day",
                    priority="medium",
                ))

        steps.append(NextStep(
            step="Track business value metrics and ROI achievement",
            role=RoleName.PRODUCT_STRATEGIST,
            estimated_time="Ongoing",
            priority="medium",
        ))
        return steps
