"""Bug fix workflow: triage, fix, regression check."""

from contracts import RoleName
from .base import PhaseSpec, TaskSpec, WorkflowTemplate

BUGFIX_WORKFLOW = WorkflowTemplate(
    name="bugfix",
    description="Reproduce, fix and guard against regression",
    phases=[
        PhaseSpec(
            key="triage",
            name="Triage",
            role=RoleName.QA_ENGINEER,
            description="Reproduce and classify the defect: {request}",
            tools=("smart_begin",),
            tasks=(
                TaskSpec(
                    "reproduce",
                    "Reproduction",
                    "Reproduce the defect and capture its impact",
                    deliverables=("reproduction-steps", "severity-assessment"),
                    estimated_minutes=30,
                ),
            ),
        ),
        PhaseSpec(
            key="fix",
            name="Fix",
            role=RoleName.DEVELOPER,
            description="Correct the root cause of the defect",
            tools=("smart_write",),
            tasks=(
                TaskSpec(
                    "patch",
                    "Root Cause Fix",
                    "Fix the root cause and add a failing-then-passing test",
                    deliverables=("patch", "regression-test"),
                    estimated_minutes=60,
                    dependencies=("task_triage_reproduce",),
                ),
            ),
            blocking=True,
        ),
        PhaseSpec(
            key="regression",
            name="Regression Verification",
            role=RoleName.QA_ENGINEER,
            description="Confirm the fix and check for regressions",
            tools=("smart_finish",),
            tasks=(
                TaskSpec(
                    "verify",
                    "Regression Run",
                    "Re-run the reproduction and the regression suite",
                    deliverables=("test-results",),
                    estimated_minutes=30,
                    dependencies=("task_fix_patch",),
                ),
            ),
            blocking=True,
        ),
    ],
)
