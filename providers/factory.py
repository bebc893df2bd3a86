"""Factory for creating knowledge providers."""

from typing import Dict, Type, Union

from contracts import KnowledgeSource
from .base import KnowledgeProvider
from .context7_provider import Context7Provider
from .websearch_provider import WebSearchProvider
from .memory_provider import MemoryProvider


# Registry of available providers
PROVIDERS: Dict[KnowledgeSource, Type[KnowledgeProvider]] = {
    KnowledgeSource.CONTEXT7: Context7Provider,
    KnowledgeSource.WEBSEARCH: WebSearchProvider,
    KnowledgeSource.MEMORY: MemoryProvider,
}

# Accepted spellings for each source
SOURCE_ALIASES: Dict[str, KnowledgeSource] = {
    "context7": KnowledgeSource.CONTEXT7,
    "docs": KnowledgeSource.CONTEXT7,
    "websearch": KnowledgeSource.WEBSEARCH,
    "web": KnowledgeSource.WEBSEARCH,
    "search": KnowledgeSource.WEBSEARCH,
    "memory": KnowledgeSource.MEMORY,
}


def get_provider(source: Union[str, KnowledgeSource]) -> KnowledgeProvider:
    """Get a knowledge provider instance.

    Args:
        source: A KnowledgeSource or one of its aliases (context7, web, memory, ...)

    Returns:
        KnowledgeProvider instance configured from settings

    Examples:
        get_provider("context7")
        get_provider(KnowledgeSource.MEMORY)
    """
    if isinstance(source, KnowledgeSource):
        key = source
    else:
        key = SOURCE_ALIASES.get(source.lower())
        if key is None:
            raise ValueError(
                f"Unknown knowledge source: {source}. "
                f"Available: {list(SOURCE_ALIASES.keys())}"
            )
    return PROVIDERS[key]()


def build_default_providers() -> Dict[KnowledgeSource, KnowledgeProvider]:
    """One provider per source, configured from settings."""
    return {source: provider_class() for source, provider_class in PROVIDERS.items()}


def list_providers() -> Dict[str, bool]:
    """List all providers and their availability.

    Returns:
        Dict mapping source name to availability status
    """
    result = {}
    for source, provider_class in PROVIDERS.items():
        try:
            result[source.value] = provider_class().is_available()
        except Exception:
            result[source.value] = False
    return result
