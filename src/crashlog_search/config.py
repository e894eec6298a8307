"""Centralized configuration for crashlog-search using Pydantic Settings."""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crashlog_search.search.models import SearchOptions


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every value can be overridden with an environment variable of the same
    name (case-insensitive) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Search defaults
    search_max_results: int = Field(default=50, ge=1, description="Default maximum number of search results")
    search_max_results_cap: int = Field(default=100, ge=1, description="Upper bound on the results of a single page")
    search_min_score: float = Field(default=1.0, ge=0.0, description="Drop results scoring below this value")
    fuzzy_max_distance: int = Field(
        default=2, ge=0, le=5, description="Maximum edit distance for fuzzy term expansion"
    )
    context_chars: int = Field(
        default=100, ge=0, description="Characters of context kept on each side of a match"
    )

    # Guards applied before a request reaches the engine
    max_query_length: int = Field(
        default=256, ge=1, description="Reject queries longer than this many characters"
    )
    max_documents: int = Field(
        default=0,
        ge=0,
        description="Retention cap for indexed crash logs; oldest are evicted first (0 disables the cap)",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")
    service_name: str = Field(default="crashlog-search", description="Service name for traces and metrics")

    def search_options(self, **overrides: Any) -> SearchOptions:
        """Build ``SearchOptions`` from configured defaults.

        ``None`` overrides are ignored so callers can pass optional request
        parameters straight through. ``max_results`` never exceeds
        ``search_max_results_cap``.
        """
        values: dict[str, Any] = {
            "max_results": self.search_max_results,
            "min_score": self.search_min_score,
            "fuzzy_distance": self.fuzzy_max_distance,
            "context_chars": self.context_chars,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        values["max_results"] = min(values["max_results"], self.search_max_results_cap)
        return SearchOptions(**values)

    def has_retention_cap(self) -> bool:
        return self.max_documents > 0
