"""Configuration settings for the Smart Orchestrate system."""

# Load .env into os.environ so provider keys are visible
from dotenv import load_dotenv
load_dotenv()

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Dict, List, Optional


class Settings(BaseSettings):
    """Global settings for Smart Orchestrate.

    Settings can be overridden via environment variables with SMART_ORCHESTRATE_ prefix.
    Example: SMART_ORCHESTRATE_ADAPTER_TIMEOUT_SECONDS=3.5
    """

    # Workflow defaults
    default_workflow: str = Field(
        default="project",
        description="Workflow template used when a request does not name one"
    )
    default_quality_level: str = Field(
        default="standard",
        description="Quality level used when a request does not name one"
    )
    min_request_length: int = Field(
        default=1,
        ge=1,
        description="Minimum length of the business request after stripping whitespace"
    )

    # Timeouts
    adapter_timeout_seconds: float = Field(
        default=2.0,
        gt=0.0,
        description="Per-adapter timeout for knowledge gathering"
    )
    orchestration_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Overall deadline for one orchestration run (None disables it)"
    )

    # Knowledge gathering
    max_knowledge_results: int = Field(
        default=20,
        ge=1,
        description="Default cap on knowledge items returned by the coordinator"
    )
    max_concurrent_adapters: int = Field(
        default=5,
        ge=1,
        description="Upper bound on worker threads used for one fan-out"
    )
    knowledge_fallbacks: bool = Field(
        default=True,
        description="Serve built-in guidance when a remote provider has no credentials"
    )
    memory_max_lessons: int = Field(
        default=500,
        ge=1,
        description="Maximum number of lessons kept by the in-process memory store"
    )

    # Run results
    max_retained_results: int = Field(
        default=200,
        ge=1,
        description="Finished workflow results kept for lookup by orchestration id"
    )

    # Quality gate
    gate_warning_band: float = Field(
        default=10.0,
        ge=0.0,
        description="Points below the pass threshold that still count as a warning"
    )
    blocking_by_default: bool = Field(
        default=False,
        description="Treat every phase as blocking regardless of its template flag"
    )

    # Context7 (documentation)
    context7_enabled: bool = Field(default=True, description="Enable the Context7 provider")
    context7_api_url: str = Field(
        default="https://context7.com/api",
        description="Context7 API base URL",
    )
    context7_api_key: str = Field(
        default="",
        description="Context7 API key (env: SMART_ORCHESTRATE_CONTEXT7_API_KEY)",
    )

    # Web search
    websearch_enabled: bool = Field(default=True, description="Enable the web search provider")
    websearch_api_url: str = Field(
        default="https://api.search.brave.com/res/v1/web/search",
        description="Web search endpoint (Brave Search API shape)",
    )
    websearch_api_key: str = Field(
        default="",
        description="Web search API key (env: SMART_ORCHESTRATE_WEBSEARCH_API_KEY)",
    )

    # Memory
    memory_enabled: bool = Field(default=True, description="Enable the in-process memory provider")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level used by the CLI")

    model_config = {
        "env_prefix": "SMART_ORCHESTRATE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def threshold_for(self, quality_level: str) -> float:
        """Pass threshold for a quality level, falling back to 'standard'."""
        return QUALITY_LEVEL_THRESHOLDS.get(quality_level, QUALITY_LEVEL_THRESHOLDS["standard"])


# Pass thresholds (0-100) for the quality gate, per requested quality level
QUALITY_LEVEL_THRESHOLDS: Dict[str, float] = {
    "basic": 60.0,
    "standard": 75.0,
    "high": 85.0,
    "enterprise": 90.0,
}

# Knowledge domain queried on behalf of each role
ROLE_KNOWLEDGE_DOMAINS: Dict[str, str] = {
    "product-strategist": "product strategy",
    "designer": "user experience design",
    "developer": "software development",
    "qa-engineer": "software testing",
    "operations-engineer": "devops",
}

# Tie-break order for knowledge items with equal relevance (lower sorts first)
SOURCE_PRIORITY: Dict[str, int] = {
    "context7": 0,
    "websearch": 1,
    "memory": 2,
}

# Metrics scored by the default quality gate for each role
ROLE_QUALITY_GATES: Dict[str, List[str]] = {
    "product-strategist": ["requirements-coverage", "business-alignment"],
    "designer": ["usability", "accessibility"],
    "developer": ["code-quality", "test-coverage", "security-scan"],
    "qa-engineer": ["test-coverage", "defect-density"],
    "operations-engineer": ["deployment-readiness", "observability"],
}


# Create singleton instance
settings = Settings()
