"""Tests for the click CLI."""

import json

import pytest
from click.testing import CliRunner
from unittest.mock import patch

from contracts import WorkflowResult
import main as cli
from main import main


@pytest.fixture
def runner():
    return CliRunner()


class TestListing:
    """Test the informational flags."""

    def test_list_workflows(self, runner):
        result = runner.invoke(main, ["--list-workflows"])
        assert result.exit_code == 0
        for name in ("project", "feature", "bugfix", "sdlc", "quality"):
            assert name in result.output

    def test_list_sources(self, runner):
        result = runner.invoke(main, ["--list-sources"])
        assert result.exit_code == 0
        assert "context7" in result.output
        assert "memory" in result.output


class TestRun:
    """Test running an orchestration from the command line."""

    def test_json_output(self, runner):
        result = runner.invoke(main, ["Build a login page", "--json", "--workflow", "feature"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert [p["name"] for p in payload["workflow"]["phases"]] == ["Feature Planning", "Implementation", "Verification"]

    def test_rich_output(self, runner):
        result = runner.invoke(main, ["Build a login page", "--project-id", "cli-project", "--goal", "Secure sign-in"])
        assert result.exit_code == 0, result.output
        assert "completed" in result.output
        assert "cli-project" in result.output
        assert "Next steps" in result.output

    def test_request_from_file(self, runner, tmp_path):
        request_file = tmp_path / "request.md"
        request_file.write_text("Add password reset", encoding="utf-8")
        with patch("main.run_orchestration", wraps=cli.run_orchestration) as run:
            result = runner.invoke(main, ["--input", str(request_file), "--json"])
        assert result.exit_code == 0, result.output
        assert run.call_args[0][0] == "Add password reset"

    def test_options_forwarded(self, runner):
        with patch("main.run_orchestration", return_value=WorkflowResult(success=True)) as run:
            result = runner.invoke(main, [
                "Fix crash", "--workflow", "bugfix", "--role", "developer", "--quality", "high",
                "--enrich", "--no-web-search", "--skip", "triage", "--timeout", "5",
            ])
        assert result.exit_code == 0, result.output
        kwargs = run.call_args[1]
        assert kwargs["workflow"] == "bugfix"
        assert kwargs["role"] == "developer"
        assert kwargs["quality_level"] == "high"
        assert kwargs["enrich"] is True
        assert kwargs["sources"] == {"use_context7": True, "use_web_search": False, "use_memory": True}
        assert kwargs["skip_phases"] == ["triage"]
        assert kwargs["timeout_seconds"] == 5.0

    def test_missing_request(self, runner):
        result = runner.invoke(main, [])
        assert result.exit_code == 1
        assert "request" in result.output

    def test_failed_run_exits_non_zero(self, runner):
        failed = WorkflowResult(success=False, error="Invalid orchestration request", error_type="ValidationError")
        with patch("main.run_orchestration", return_value=failed):
            result = runner.invoke(main, ["x"])
        assert result.exit_code == 1
        assert "Invalid orchestration request" in result.output

    def test_invalid_workflow_choice(self, runner):
        result = runner.invoke(main, ["x", "--workflow", "waterfall"])
        assert result.exit_code == 2
