"""Per-invocation configuration value objects."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RunConfig(BaseModel):
    """Knobs for a single agent run.

    ``None`` means "use the backend or agent default".
    """

    max_tokens: int | None = None
    temperature: float = 0.7
    context_window_compression: bool = False
    max_steps: int | None = Field(default=None, ge=1, description="Upper bound on model calls per agent run")
    timeout_seconds: float | None = None


class ContextCacheConfig(BaseModel):
    """Context caching hints passed through to backends that support them."""

    min_tokens: int = 1024
    ttl_seconds: int = 300
    cache_intervals: list[int] = Field(default_factory=list)
