"""The smart_orchestrate tool: schema and transport-agnostic handler."""

import logging
from typing import Any, Dict, Optional

from contracts import OrchestrationRequest
from .orchestration_engine import OrchestrationEngine

logger = logging.getLogger(__name__)

TOOL_NAME = "smart_orchestrate"

SMART_ORCHESTRATE_TOOL: Dict[str, Any] = {
    "name": TOOL_NAME,
    "description": (
        "Orchestrate a business request through role-specific workflow phases "
        "(strategy, design, development, QA, operations) with a shared business "
        "context, quality gates and optional external knowledge enrichment."
    ),
    "inputSchema": OrchestrationRequest.model_json_schema(by_alias=True),
}

_default_engine: Optional[OrchestrationEngine] = None


def get_default_engine() -> OrchestrationEngine:
    """Process-wide engine, created on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = OrchestrationEngine()
    return _default_engine


def handle_smart_orchestrate(payload: Any, engine: Optional[OrchestrationEngine] = None) -> Dict[str, Any]:
    """Handle one smart_orchestrate call.

    Args:
        payload: Raw tool arguments (camelCase or snake_case keys)
        engine: Engine to run on; defaults to the shared one

    Returns:
        The WorkflowResult as a camelCase JSON-ready dict
    """
    engine = engine or get_default_engine()
    if not isinstance(payload, dict):
        payload = {"request": payload} if isinstance(payload, str) else {}
    result = engine.orchestrate(payload)
    if not result.success:
        logger.info("%s returned failure: %s", TOOL_NAME, result.error)
    return result.model_dump(by_alias=True, mode="json")
