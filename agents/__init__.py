"""Role agents and quality gates for Smart Orchestrate.

Each role agent executes the phases assigned to its role; the quality gate
judges every phase before the workflow moves on.
"""

from .base_agent import RoleAgent
from .role_agents import DeliverableAgent, AgentRegistry, DEFAULT_DELIVERABLES
from .quality_gate import QualityGate, ThresholdQualityGate

__all__ = [
    # Base
    "RoleAgent",
    # Role agents
    "DeliverableAgent",
    "AgentRegistry",
    "DEFAULT_DELIVERABLES",
    # Gates
    "QualityGate",
    "ThresholdQualityGate",
]
