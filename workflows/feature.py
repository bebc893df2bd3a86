"""Single feature workflow."""

from contracts import RoleName
from .base import PhaseSpec, TaskSpec, WorkflowTemplate

FEATURE_WORKFLOW = WorkflowTemplate(
    name="feature",
    description="Plan, implement and verify one feature",
    phases=[
        PhaseSpec(
            key="planning",
            name="Feature Planning",
            role=RoleName.PRODUCT_STRATEGIST,
            description="Scope the feature and its acceptance criteria: {request}",
            tools=("smart_plan",),
            tasks=(
                TaskSpec(
                    "scope",
                    "Feature Scoping",
                    "Define scope, acceptance criteria and dependencies",
                    deliverables=("feature-spec", "acceptance-criteria"),
                    estimated_minutes=30,
                ),
            ),
        ),
        PhaseSpec(
            key="implementation",
            name="Implementation",
            role=RoleName.DEVELOPER,
            description="Build the feature against its acceptance criteria",
            tools=("smart_write", "smart_begin"),
            tasks=(
                TaskSpec(
                    "build",
                    "Feature Build",
                    "Implement the feature with unit tests",
                    deliverables=("source-code", "unit-tests"),
                    estimated_minutes=90,
                    dependencies=("task_planning_scope",),
                ),
            ),
            blocking=True,
        ),
        PhaseSpec(
            key="verification",
            name="Verification",
            role=RoleName.QA_ENGINEER,
            description="Verify the feature meets its acceptance criteria",
            tools=("smart_finish",),
            tasks=(
                TaskSpec(
                    "acceptance",
                    "Acceptance Testing",
                    "Run acceptance and exploratory tests",
                    deliverables=("test-results",),
                    estimated_minutes=45,
                    dependencies=("task_implementation_build",),
                ),
            ),
        ),
    ],
)
