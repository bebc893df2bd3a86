"""Full project workflow: strategy through operations."""

from contracts import RoleName
from .base import PhaseSpec, TaskSpec, WorkflowTemplate

PROJECT_WORKFLOW = WorkflowTemplate(
    name="project",
    description="End-to-end delivery: strategy, design, build, test and operate",
    phases=[
        PhaseSpec(
            key="planning",
            name="Strategic Planning",
            role=RoleName.PRODUCT_STRATEGIST,
            description="Analyze business requirements and create strategic plan for: {request}",
            tools=("smart_plan", "smart_begin"),
            tasks=(
                TaskSpec(
                    "business_analysis",
                    "Business Analysis",
                    "Analyze business requirements and market context",
                    deliverables=("business-analysis", "requirements-doc"),
                    estimated_minutes=45,
                ),
            ),
            blocking=True,
        ),
        PhaseSpec(
            key="design",
            name="Experience Design",
            role=RoleName.DESIGNER,
            description="Design the user experience and interface for: {request}",
            tools=("smart_plan", "smart_write"),
            tasks=(
                TaskSpec(
                    "ux_design",
                    "UX Design",
                    "Produce user flows, wireframes and accessibility notes",
                    deliverables=("user-flows", "wireframes"),
                    estimated_minutes=60,
                    dependencies=("task_planning_business_analysis",),
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
                    "implementation",
                    "Implementation",
                    "Develop the core functionality and features",
                    deliverables=("source-code", "unit-tests"),
                    estimated_minutes=90,
                    dependencies=("task_design_ux_design",),
                ),
            ),
            blocking=True,
        ),
        PhaseSpec(
            key="testing",
            name="Quality Assurance",
            role=RoleName.QA_ENGINEER,
            description="Comprehensive testing and quality validation",
            tools=("smart_finish", "smart_write"),
            tasks=(
                TaskSpec(
                    "validation",
                    "Quality Validation",
                    "Execute comprehensive testing and quality checks",
                    deliverables=("test-results", "quality-report"),
                    estimated_minutes=60,
                    dependencies=("task_development_implementation",),
                ),
            ),
        ),
        PhaseSpec(
            key="deployment",
            name="Deployment & Operations",
            role=RoleName.OPERATIONS_ENGINEER,
            description="Deploy solution and set up monitoring",
            tools=("smart_finish", "smart_orchestrate"),
            tasks=(
                TaskSpec(
                    "release",
                    "Production Deployment",
                    "Deploy to production and configure monitoring",
                    deliverables=("deployment-config", "monitoring-setup"),
                    estimated_minutes=45,
                    dependencies=("task_testing_validation",),
                ),
            ),
        ),
    ],
)
