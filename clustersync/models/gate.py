from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CycleAcknowledgement(BaseModel):
    """Proof that a requested out-of-band cycle was picked up by the scheduler."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    ticket: int
    elapsed_s: float = Field(ge=0)
    completed: bool = False


class TwoPhaseCycle(BaseModel):
    """Acknowledgements of a trigger, observe, trigger sequence."""

    model_config = ConfigDict(frozen=True)

    first: CycleAcknowledgement
    second: CycleAcknowledgement
    observed_after_s: float = Field(ge=0)


__all__ = ["CycleAcknowledgement", "TwoPhaseCycle"]
