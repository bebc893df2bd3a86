"""Business Context Broker: the single owner of every project's context.

Callers only ever receive deep copies. All changes go through merge (or the
explicit reset), each of which bumps the context version by exactly one while
holding that project's lock.
"""

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from contracts import (
    BusinessContext,
    ContextInsights,
    ContextValidation,
    PartialBusinessContext,
    RoleTransition,
    SuccessCriteria,
)
from contracts.errors import NotFoundError

logger = logging.getLogger(__name__)

MAX_ROLE_HISTORY = 50


def union_ordered(existing: List[str], incoming: List[str]) -> List[str]:
    """Append incoming values that are not already present, keeping order."""
    merged = list(existing)
    seen = set(existing)
    for value in incoming:
        if value not in seen:
            merged.append(value)
            seen.add(value)
    return merged


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overlay into a copy of base. Non-dict values are replaced."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class BusinessContextBroker:
    """Versioned, per-project serialized store of BusinessContext."""

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._contexts: Dict[str, BusinessContext] = {}
        self._history: Dict[str, Deque[RoleTransition]] = {}

    def _lock_for(self, project_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(project_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[project_id] = lock
            return lock

    def get_or_create(self, project_id: str) -> BusinessContext:
        """Return the project's context, creating an empty one at version 0."""
        with self._lock_for(project_id):
            context = self._contexts.get(project_id)
            if context is None:
                context = BusinessContext(project_id=project_id)
                self._contexts[project_id] = context
                self._history[project_id] = deque(maxlen=MAX_ROLE_HISTORY)
                logger.debug("Created business context for %s", project_id)
            return context.model_copy(deep=True)

    def merge(self, project_id: str, partial: PartialBusinessContext) -> BusinessContext:
        """Merge a partial context into the stored one.

        Goals, requirements and stakeholders are unioned in order. Constraints
        are deep-overwritten. market_context is replaced and success criteria
        unioned when given.

        Raises:
            NotFoundError: if the project was never created
        """
        with self._lock_for(project_id):
            current = self._contexts.get(project_id)
            if current is None:
                raise NotFoundError(project_id)

            success = current.success
            if partial.success is not None:
                success = SuccessCriteria(
                    metrics=union_ordered(success.metrics, partial.success.metrics),
                    criteria=union_ordered(success.criteria, partial.success.criteria),
                )

            updated = BusinessContext(
                project_id=project_id,
                business_goals=union_ordered(current.business_goals, partial.business_goals),
                requirements=union_ordered(current.requirements, partial.requirements),
                stakeholders=union_ordered(current.stakeholders, partial.stakeholders),
                constraints=deep_merge(current.constraints, partial.constraints),
                market_context=partial.market_context or current.market_context,
                success=success,
                version=current.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            self._contexts[project_id] = updated
            return updated.model_copy(deep=True)

    def reset(self, project_id: str, partial: Optional[PartialBusinessContext] = None) -> BusinessContext:
        """Replace the stored context wholesale. The version still moves forward."""
        partial = partial or PartialBusinessContext()
        with self._lock_for(project_id):
            current = self._contexts.get(project_id)
            version = current.version + 1 if current is not None else 0
            replaced = BusinessContext(
                project_id=project_id,
                business_goals=union_ordered([], partial.business_goals),
                requirements=union_ordered([], partial.requirements),
                stakeholders=union_ordered([], partial.stakeholders),
                constraints=deep_merge({}, partial.constraints),
                market_context=partial.market_context,
                success=partial.success or SuccessCriteria(),
                version=version,
            )
            self._contexts[project_id] = replaced
            self._history.setdefault(project_id, deque(maxlen=MAX_ROLE_HISTORY))
            logger.info("Reset business context for %s (version %d)", project_id, version)
            return replaced.model_copy(deep=True)

    def snapshot(self, project_id: str) -> Optional[BusinessContext]:
        """Deep copy of the stored context, or None if there is none."""
        with self._lock_for(project_id):
            context = self._contexts.get(project_id)
            return context.model_copy(deep=True) if context is not None else None

    def evict(self, project_id: str) -> bool:
        """Drop a project's context and history. Returns False if it was not stored."""
        with self._lock_for(project_id):
            removed = self._contexts.pop(project_id, None) is not None
            self._history.pop(project_id, None)
        return removed

    def project_ids(self) -> List[str]:
        with self._registry_lock:
            candidates = list(self._locks)
        return [pid for pid in candidates if pid in self._contexts]

    def record_transition(
        self,
        project_id: str,
        from_role: str,
        to_role: str,
        orchestration_id: Optional[str] = None,
    ) -> RoleTransition:
        """Record a hand-over between roles against the current context version.

        Raises:
            NotFoundError: if the project was never created
        """
        with self._lock_for(project_id):
            context = self._contexts.get(project_id)
            if context is None:
                raise NotFoundError(project_id)
            transition = RoleTransition(
                from_role=from_role,
                to_role=to_role,
                orchestration_id=orchestration_id,
                context_version=context.version,
            )
            self._history.setdefault(project_id, deque(maxlen=MAX_ROLE_HISTORY)).append(transition)
            return transition

    def role_history(self, project_id: str) -> List[RoleTransition]:
        """Most recent role transitions for a project, oldest first."""
        with self._lock_for(project_id):
            return [t.model_copy() for t in self._history.get(project_id, ())]

    def validate_context(self, project_id: str) -> ContextValidation:
        context = self.snapshot(project_id)
        if context is None:
            return ContextValidation(
                is_valid=False,
                issues=[f"No business context for project: {project_id}"],
                recommendations=["Start an orchestration to create the project context"],
            )

        issues: List[str] = []
        recommendations: List[str] = []
        if not context.business_goals:
            issues.append("No business goals defined")
            recommendations.append("Define clear business goals for the project")
        if not context.requirements:
            issues.append("No requirements specified")
            recommendations.append("Capture the key functional requirements")
        if not context.success.metrics:
            recommendations.append("Add success metrics to measure outcomes")
        if not context.stakeholders:
            recommendations.append("Identify the stakeholders for the project")

        return ContextValidation(is_valid=not issues, issues=issues, recommendations=recommendations)

    def context_insights(self, project_id: str) -> ContextInsights:
        """Derived alignment and richness indicators for a project.

        Raises:
            NotFoundError: if the project was never created
        """
        context = self.snapshot(project_id)
        if context is None:
            raise NotFoundError(project_id)

        goals = len(context.business_goals)
        requirements = len(context.requirements)
        business_alignment = min(100.0, goals * 20.0 + len(context.success.metrics) * 10.0)
        context_richness = min(
            100.0,
            goals * 10.0
            + requirements * 5.0
            + len(context.stakeholders) * 5.0
            + len(context.constraints) * 5.0
            + (10.0 if context.market_context else 0.0),
        )

        recommendations: List[str] = []
        if business_alignment < 50:
            recommendations.append("Clarify business goals and success metrics")
        if context_richness < 50:
            recommendations.append("Enrich the context with requirements and constraints")
        if not recommendations:
            recommendations.append("Context is well developed; keep it current between phases")

        return ContextInsights(
            business_alignment=business_alignment,
            context_richness=context_richness,
            role_transition_count=len(self.role_history(project_id)),
            recommendations=recommendations,
        )
