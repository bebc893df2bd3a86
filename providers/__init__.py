"""Knowledge providers queried through the MCP coordinator."""

from .base import KnowledgeProvider, extract_topics, extract_problems
from .context7_provider import Context7Provider
from .websearch_provider import WebSearchProvider
from .memory_provider import MemoryProvider, Lesson, Pattern
from .factory import get_provider, build_default_providers, list_providers, PROVIDERS

__all__ = [
    "KnowledgeProvider",
    "extract_topics",
    "extract_problems",
    "Context7Provider",
    "WebSearchProvider",
    "MemoryProvider",
    "Lesson",
    "Pattern",
    "get_provider",
    "build_default_providers",
    "list_providers",
    "PROVIDERS",
]
