"""Business context contracts shared by every workflow phase."""

from pydantic import Field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from .base import WireModel


class MarketContext(WireModel):
    """Market the project is aimed at."""
    industry: str = ""
    target_market: str = ""
    competitors: List[str] = Field(default_factory=list)


class SuccessCriteria(WireModel):
    """How the project will be judged."""
    metrics: List[str] = Field(default_factory=list)
    criteria: List[str] = Field(default_factory=list)


class BusinessContext(WireModel):
    """The accumulated business context for one project.

    Owned by the BusinessContextBroker; callers only ever hold copies.
    """
    project_id: str = Field(..., min_length=1, description="Opaque stable project identifier")
    business_goals: List[str] = Field(default_factory=list, description="Ordered; later phases may append")
    requirements: List[str] = Field(default_factory=list, description="Ordered requirement statements")
    stakeholders: List[str] = Field(default_factory=list, description="Role names, unique")
    constraints: Dict[str, Any] = Field(default_factory=dict, description="Technology choices, risk profile, phase records")
    market_context: Optional[MarketContext] = None
    success: SuccessCriteria = Field(default_factory=SuccessCriteria)
    version: int = Field(default=0, ge=0, description="Incremented on every mutation")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PartialBusinessContext(WireModel):
    """A partial context to merge into the stored one."""
    project_id: Optional[str] = Field(default=None, min_length=1)
    business_goals: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    stakeholders: List[str] = Field(default_factory=list)
    constraints: Dict[str, Any] = Field(default_factory=dict)
    market_context: Optional[MarketContext] = None
    success: Optional[SuccessCriteria] = None


class RoleTransition(WireModel):
    """A hand-over between two roles on the same project."""
    from_role: str
    to_role: str
    orchestration_id: Optional[str] = None
    context_version: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ContextValidation(WireModel):
    """Integrity report for a stored context."""
    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ContextInsights(WireModel):
    """Derived indicators for a stored context."""
    business_alignment: float = Field(0.0, ge=0.0, le=100.0)
    context_richness: float = Field(0.0, ge=0.0, le=100.0)
    role_transition_count: int = 0
    recommendations: List[str] = Field(default_factory=list)
