"""Default role agents and the per-role agent registry."""

import logging
from typing import Dict, List, Optional

from contracts import BusinessContext, Phase, RoleName, TaskReport
from .base_agent import RoleAgent

logger = logging.getLogger(__name__)


# Deliverables reported for a phase whose tasks declare none
DEFAULT_DELIVERABLES: Dict[RoleName, List[str]] = {
    RoleName.PRODUCT_STRATEGIST: ["business-analysis", "requirements-doc"],
    RoleName.DESIGNER: ["user-flows", "wireframes"],
    RoleName.DEVELOPER: ["source-code", "unit-tests"],
    RoleName.QA_ENGINEER: ["test-results", "quality-report"],
    RoleName.OPERATIONS_ENGINEER: ["deployment-config", "monitoring-setup"],
}


class DeliverableAgent(RoleAgent):
    """Reports each task's declared deliverables as produced.

    Stands in for the single-shot template tools that do the real work.
    """

    def execute(self, phase: Phase, context: BusinessContext) -> TaskReport:
        deliverables: List[str] = []
        for task in phase.tasks:
            for deliverable in task.deliverables:
                if deliverable not in deliverables:
                    deliverables.append(deliverable)
        if not deliverables:
            deliverables = list(DEFAULT_DELIVERABLES.get(self.role, []))

        notes = {task.id: task.name for task in phase.tasks}
        logger.debug("%s produced %d deliverable(s) for %s", self.role.value, len(deliverables), phase.name)
        return TaskReport(success=True, deliverables=deliverables, notes=notes)


class AgentRegistry:
    """Maps each role to the agent that executes its phases."""

    def __init__(self, agents: Optional[Dict[RoleName, RoleAgent]] = None):
        self._agents: Dict[RoleName, RoleAgent] = {role: DeliverableAgent(role) for role in RoleName}
        if agents:
            self._agents.update(agents)

    def register(self, role: RoleName, agent: RoleAgent) -> None:
        """Replace the agent used for a role."""
        self._agents[role] = agent

    def get(self, role: RoleName) -> RoleAgent:
        return self._agents[role]

    def roles(self) -> List[RoleName]:
        return list(self._agents)
