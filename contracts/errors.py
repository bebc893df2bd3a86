"""Error taxonomy for orchestration.

Only ValidationError, NotFoundError and OrchestrationTimeout ever surface to
callers (as ``success=False`` results). Adapter errors and quality gate
failures are absorbed and reported as data.
"""

from typing import List, Optional


class OrchestrationError(Exception):
    """Base class for every orchestration error."""


class ValidationError(OrchestrationError):
    """Malformed orchestration request. Raised before any context is touched."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or [message]


class NotFoundError(OrchestrationError):
    """A project context was expected in the broker but is missing."""

    def __init__(self, project_id: str):
        super().__init__(f"No business context for project: {project_id}")
        self.project_id = project_id


class AdapterFailure(OrchestrationError):
    """A knowledge provider failed. Always recovered by the coordinator."""

    def __init__(self, source: str, cause: BaseException):
        super().__init__(f"{source} failed: {cause}")
        self.source = source
        self.cause = cause


class AdapterTimeoutError(OrchestrationError):
    """A knowledge provider did not answer within its timeout."""

    def __init__(self, source: str, timeout_seconds: float):
        super().__init__(f"{source} timed out after {timeout_seconds:.2f}s")
        self.source = source
        self.timeout_seconds = timeout_seconds


class QualityGateFailure(OrchestrationError):
    """A blocking phase failed its quality gate."""

    def __init__(self, phase_name: str, issues: Optional[List[str]] = None):
        detail = "; ".join(issues) if issues else "gate reported fail"
        super().__init__(f"Quality gate failed for blocking phase '{phase_name}': {detail}")
        self.phase_name = phase_name
        self.issues = issues or []


class OrchestrationTimeout(OrchestrationError):
    """The run exceeded its configured deadline."""

    def __init__(self, timeout_seconds: float, phase_name: Optional[str] = None):
        where = f" before phase '{phase_name}'" if phase_name else ""
        super().__init__(f"Orchestration exceeded {timeout_seconds:.2f}s deadline{where}")
        self.timeout_seconds = timeout_seconds
        self.phase_name = phase_name
