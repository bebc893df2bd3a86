"""Workflow templates: named phase plans for orchestration runs."""

from typing import Dict, List

from .base import PhaseSpec, TaskSpec, WorkflowTemplate
from .project import PROJECT_WORKFLOW
from .feature import FEATURE_WORKFLOW
from .bugfix import BUGFIX_WORKFLOW
from .sdlc import SDLC_WORKFLOW
from .quality import QUALITY_WORKFLOW


# Registry of available templates
WORKFLOW_TEMPLATES: Dict[str, WorkflowTemplate] = {
    template.name: template
    for template in (
        PROJECT_WORKFLOW,
        FEATURE_WORKFLOW,
        BUGFIX_WORKFLOW,
        SDLC_WORKFLOW,
        QUALITY_WORKFLOW,
    )
}


def get_template(name: str) -> WorkflowTemplate:
    """Look up a template by name.

    Raises:
        KeyError: if no template has that name
    """
    try:
        return WORKFLOW_TEMPLATES[name.strip().lower()]
    except KeyError:
        raise KeyError(
            f"Unknown workflow: {name}. Available: {list_templates()}"
        ) from None


def list_templates() -> List[str]:
    return list(WORKFLOW_TEMPLATES)


__all__ = [
    "PhaseSpec",
    "TaskSpec",
    "WorkflowTemplate",
    "WORKFLOW_TEMPLATES",
    "get_template",
    "list_templates",
]
