"""Librarian module: external knowledge coordination."""

from .mcp_coordinator import MCPCoordinator, rank_items

__all__ = ["MCPCoordinator", "rank_items"]
