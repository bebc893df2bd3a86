"""Classic four-phase SDLC workflow."""

from contracts import QualityLevel, RoleName
from .base import PhaseSpec, TaskSpec, WorkflowTemplate

SDLC_WORKFLOW = WorkflowTemplate(
    name="sdlc",
    description="Planning, development, quality assurance and deployment",
    phases=[
        PhaseSpec(
            key="planning",
            name="Strategic Planning",
            role=RoleName.PRODUCT_STRATEGIST,
            description="Analyze business requirements and create strategic plan for: {request}",
            tools=("smart_plan", "smart_begin"),
            tasks=(
                TaskSpec(
                    "1",
                    "Business Analysis",
                    "Analyze business requirements and market context",
                    deliverables=("business-analysis", "requirements-doc"),
                    estimated_minutes=45,
                ),
            ),
        ),
        PhaseSpec(
            key="development",
            name="Development",
            role=RoleName.DEVELOPER,
            description="Implement the solution with best practices and quality standards",
            tools=("smart_write", "smart_begin"),
            tasks=(
                TaskSpec(
                    "1",
                    "Implementation",
                    "Develop the core functionality and features",
                    deliverables=("source-code", "unit-tests"),
                    estimated_minutes=90,
                    dependencies=("task_planning_1",),
                ),
            ),
        ),
        PhaseSpec(
            key="testing",
            name="Quality Assurance",
            role=RoleName.QA_ENGINEER,
            description="Comprehensive testing and quality validation",
            tools=("smart_finish", "smart_write"),
            tasks=(
                TaskSpec(
                    "1",
                    "Quality Validation",
                    "Execute comprehensive testing and quality checks",
                    deliverables=("test-results", "quality-report"),
                    estimated_minutes=60,
                    dependencies=("task_development_1",),
                ),
            ),
            skip_below_quality=QualityLevel.STANDARD,
        ),
        PhaseSpec(
            key="deployment",
            name="Deployment & Operations",
            role=RoleName.OPERATIONS_ENGINEER,
            description="Deploy solution and set up monitoring",
            tools=("smart_finish", "smart_orchestrate"),
            tasks=(
                TaskSpec(
                    "1",
                    "Production Deployment",
                    "Deploy to production and configure monitoring",
                    deliverables=("deployment-config", "monitoring-setup"),
                    estimated_minutes=45,
                    dependencies=("task_testing_1",),
                ),
            ),
        ),
    ],
)
