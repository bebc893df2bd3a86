"""Quality improvement workflow."""

from contracts import RoleName
from .base import PhaseSpec, TaskSpec, WorkflowTemplate

QUALITY_WORKFLOW = WorkflowTemplate(
    name="quality",
    description="Audit an existing system, remediate findings and sign off",
    phases=[
        PhaseSpec(
            key="audit",
            name="Quality Audit",
            role=RoleName.QA_ENGINEER,
            description="Audit quality, security and test coverage for: {request}",
            tools=("smart_finish",),
            tasks=(
                TaskSpec(
                    "scan",
                    "Quality Scan",
                    "Assess coverage, security findings and complexity hot spots",
                    deliverables=("quality-report", "findings-list"),
                    estimated_minutes=60,
                ),
            ),
        ),
        PhaseSpec(
            key="remediation",
            name="Remediation",
            role=RoleName.DEVELOPER,
            description="Resolve the highest-impact audit findings",
            tools=("smart_write",),
            tasks=(
                TaskSpec(
                    "resolve",
                    "Finding Resolution",
                    "Fix prioritized findings and add missing tests",
                    deliverables=("source-code", "unit-tests"),
                    estimated_minutes=90,
                    dependencies=("task_audit_scan",),
                ),
            ),
        ),
        PhaseSpec(
            key="signoff",
            name="Sign-off",
            role=RoleName.QA_ENGINEER,
            description="Re-audit and sign off the remediated system",
            tools=("smart_finish",),
            tasks=(
                TaskSpec(
                    "reaudit",
                    "Re-audit",
                    "Confirm findings are closed and record the final scorecard",
                    deliverables=("quality-scorecard",),
                    estimated_minutes=30,
                    dependencies=("task_remediation_resolve",),
                ),
            ),
        ),
    ],
)
