from __future__ import annotations

from pydantic import BaseModel, Field


class FileStatus(BaseModel):
    """The subset of a remote file status the wait helpers inspect."""

    path: str
    persisted: bool = False
    cached_percentage: int = Field(default=0, ge=0, le=100)

    @property
    def fully_cached(self) -> bool:
        return self.cached_percentage == 100


__all__ = ["FileStatus"]
