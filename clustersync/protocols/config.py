from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ConfigurationStore(Protocol):
    def get(self, key: str, default: object | None = None) -> object | None: ...

    def set(self, key: str, value: object) -> None: ...

    def __contains__(self, key: object) -> bool: ...


__all__ = ["ConfigurationStore"]
