"""Base class for role agents.

A role agent carries out the tasks of one phase on behalf of its role. It is
handed a read-only snapshot of the business context and reports back what it
delivered; it never mutates the context itself.
"""

import logging
from abc import ABC, abstractmethod

from contracts import BusinessContext, Phase, RoleName, TaskReport

logger = logging.getLogger(__name__)


class RoleAgent(ABC):
    """Executes a phase's tasks for one role."""

    def __init__(self, role: RoleName):
        self.role = role

    @abstractmethod
    def execute(self, phase: Phase, context: BusinessContext) -> TaskReport:
        """Run the phase's tasks.

        Args:
            phase: The phase being executed (its role matches this agent's)
            context: Snapshot of the business context at phase start

        Returns:
            TaskReport with success flag, deliverables and any issues
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(role={self.role.value})"
