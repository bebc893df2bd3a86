"""Tests for the smart_orchestrate tool boundary and the convenience runner."""

import pytest

from librarian import MCPCoordinator
from orchestrator import (
    BusinessContextBroker,
    OrchestrationEngine,
    SMART_ORCHESTRATE_TOOL,
    handle_smart_orchestrate,
    run_orchestration,
)


@pytest.fixture
def engine():
    return OrchestrationEngine(broker=BusinessContextBroker(), coordinator=MCPCoordinator(providers={}))


class TestToolSchema:
    """Test the published tool definition."""

    def test_schema_shape(self):
        assert SMART_ORCHESTRATE_TOOL["name"] == "smart_orchestrate"
        schema = SMART_ORCHESTRATE_TOOL["inputSchema"]
        assert "request" in schema["properties"]
        assert "externalSources" in schema["properties"]
        assert schema["required"] == ["request"]


class TestHandler:
    """Test the transport-agnostic handler."""

    def test_success_payload_is_camel_case(self, engine):
        response = handle_smart_orchestrate({"request": "Build a login page"}, engine=engine)
        assert response["success"] is True
        assert response["orchestrationId"].startswith("orchestration_")
        assert response["workflow"]["status"] == "completed"
        assert len(response["workflow"]["phases"]) == 5
        assert response["technicalMetrics"]["contextPreservationAccuracy"] == 1.0
        assert response["externalIntegration"]["memoryStatus"] == "disabled"
        assert response["businessContext"]["projectId"]
        assert response["timestamp"]

    def test_failure_payload(self, engine):
        response = handle_smart_orchestrate({"request": ""}, engine=engine)
        assert response["success"] is False
        assert response["errorType"] == "ValidationError"
        assert response["error"]
        assert response["timestamp"]

    def test_bare_string_payload(self, engine):
        response = handle_smart_orchestrate("Add password reset", engine=engine)
        assert response["success"] is True

    def test_non_dict_payload(self, engine):
        response = handle_smart_orchestrate(42, engine=engine)
        assert response["success"] is False


class TestRunOrchestration:
    """Test the keyword-argument runner."""

    def test_run(self, engine):
        result = run_orchestration(
            "Fix crash on save",
            workflow="bugfix",
            quality_level="basic",
            project_id="bugs",
            goals=["Stop data loss"],
            engine=engine,
        )
        assert result.success is True
        assert result.business_context.project_id == "bugs"
        assert result.business_context.business_goals == ["Stop data loss"]
        assert [p.name for p in result.workflow.phases] == ["Triage", "Fix", "Regression Verification"]

    def test_sources_and_skips(self, engine):
        result = run_orchestration(
            "Ship release",
            workflow="sdlc",
            sources={"use_context7": False},
            skip_phases=["planning"],
            engine=engine,
        )
        assert [p.id for p in result.workflow.phases] == ["development", "testing", "deployment"]
