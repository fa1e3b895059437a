"""Port for the human readable output sink."""

from __future__ import annotations

from typing import Protocol


class FetchLogger(Protocol):
    def info(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def flush(self) -> None:
        ...


__all__ = ["FetchLogger"]
