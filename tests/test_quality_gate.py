"""Tests for role agents and the threshold quality gate."""

import pytest

from agents import AgentRegistry, DeliverableAgent, RoleAgent, ThresholdQualityGate, DEFAULT_DELIVERABLES
from contracts import (
    BusinessContext,
    GateOutcome,
    Phase,
    QualityLevel,
    RoleName,
    Task,
    TaskReport,
)


def make_phase(tools=(), tasks=True, description="Short", role=RoleName.DEVELOPER) -> Phase:
    return Phase(
        id="development",
        name="Development",
        role=role,
        description=description,
        tools=list(tools),
        tasks=[Task(id="t1", name="Build", deliverables=["source-code"])] if tasks else [],
    )


def make_context(goals=0, requirements=0) -> BusinessContext:
    return BusinessContext(
        project_id="p1",
        business_goals=[f"goal {i}" for i in range(goals)],
        requirements=[f"req {i}" for i in range(requirements)],
    )


class TestDeliverableAgent:
    """Test the default role agent."""

    def test_reports_task_deliverables(self):
        phase = make_phase()
        phase.tasks.append(Task(id="t2", name="Test", deliverables=["source-code", "unit-tests"]))
        report = DeliverableAgent(RoleName.DEVELOPER).execute(phase, make_context())
        assert report.success is True
        assert report.deliverables == ["source-code", "unit-tests"]
        assert report.notes == {"t1": "Build", "t2": "Test"}

    def test_defaults_without_tasks(self):
        report = DeliverableAgent(RoleName.DESIGNER).execute(make_phase(tasks=False, role=RoleName.DESIGNER), make_context())
        assert report.deliverables == DEFAULT_DELIVERABLES[RoleName.DESIGNER]


class TestAgentRegistry:
    """Test per-role agent registration."""

    def test_every_role_has_default(self):
        registry = AgentRegistry()
        assert set(registry.roles()) == set(RoleName)
        assert isinstance(registry.get(RoleName.QA_ENGINEER), DeliverableAgent)

    def test_override(self):
        class Custom(RoleAgent):
            def execute(self, phase, context):
                return TaskReport(deliverables=["custom"])

        registry = AgentRegistry({RoleName.DEVELOPER: Custom(RoleName.DEVELOPER)})
        assert isinstance(registry.get(RoleName.DEVELOPER), Custom)
        registry.register(RoleName.DESIGNER, Custom(RoleName.DESIGNER))
        assert isinstance(registry.get(RoleName.DESIGNER), Custom)


class TestThresholdQualityGate:
    """Test scoring and outcomes."""

    def test_base_score(self):
        gate = ThresholdQualityGate()
        assert gate.score(make_phase(tasks=False), make_context()) == 70.0

    def test_bonuses_are_capped(self):
        gate = ThresholdQualityGate()
        phase = make_phase(tools=["a", "b", "c", "d", "e"], description="x" * 150)
        assert gate.score(phase, make_context(goals=10, requirements=10)) == 100.0

    def test_partial_bonuses(self):
        gate = ThresholdQualityGate()
        # context 10+5=15 -> 4.5, tools 2 -> 10 -> 5, tasks -> 5
        phase = make_phase(tools=["smart_write", "smart_begin"])
        assert gate.score(phase, make_context(goals=1, requirements=1)) == pytest.approx(84.5)

    def test_pass(self):
        result = ThresholdQualityGate().evaluate(
            make_phase(tools=["a", "b"]), TaskReport(), make_context(1, 1), QualityLevel.STANDARD
        )
        assert result.outcome == GateOutcome.PASS
        assert result.threshold == 75.0
        assert set(result.metrics) == {"code-quality", "test-coverage", "security-scan"}
        assert result.issues == []

    def test_warning_within_band(self):
        result = ThresholdQualityGate().evaluate(
            make_phase(tasks=False), TaskReport(), make_context(), QualityLevel.STANDARD
        )
        assert result.outcome == GateOutcome.WARNING
        assert result.issues

    def test_fail_below_band(self):
        result = ThresholdQualityGate().evaluate(
            make_phase(tasks=False), TaskReport(), make_context(), QualityLevel.HIGH
        )
        assert result.outcome == GateOutcome.FAIL

    def test_basic_level_passes_base_score(self):
        result = ThresholdQualityGate().evaluate(
            make_phase(tasks=False), TaskReport(), make_context(), QualityLevel.BASIC
        )
        assert result.outcome == GateOutcome.PASS

    def test_failed_report_fails_gate(self):
        result = ThresholdQualityGate().evaluate(
            make_phase(tools=["a", "b"]),
            TaskReport(success=False, issues=["compile error"]),
            make_context(5, 5),
            QualityLevel.BASIC,
        )
        assert result.outcome == GateOutcome.FAIL
        assert result.issues == ["compile error"]

    def test_custom_warning_band(self):
        result = ThresholdQualityGate(warning_band=0).evaluate(
            make_phase(tasks=False), TaskReport(), make_context(), QualityLevel.STANDARD
        )
        assert result.outcome == GateOutcome.FAIL
