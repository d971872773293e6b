from __future__ import annotations

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, Field


class WaitSpec(BaseModel):
    """One bounded wait: what to check, for how long, and how often."""

    model_config = ConfigDict(frozen=True)

    description: str
    predicate: Callable[[], bool]
    timeout_s: float = Field(gt=0)
    interval_s: float = Field(gt=0)


__all__ = ["WaitSpec"]
