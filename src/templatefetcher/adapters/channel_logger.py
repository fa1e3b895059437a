"""Output channel logger built on the standard ``logging`` module."""

from __future__ import annotations

import logging
from typing import List

CHANNEL_NAME = "Template Fetcher"
LOGGER_ROOT = "templatefetcher"


class ChannelLogger:
    """Prefixed logger that also keeps the lines emitted since the last flush.

    The retained history plays the part of an output panel: the CLI shows it
    when an operation fails and ``flush`` clears it before a new run.
    """

    def __init__(self, prefix: str = "", *, logger: logging.Logger | None = None) -> None:
        self.prefix = prefix
        channel = prefix.strip("[]").strip().lower() or "main"
        self._logger = logger or logging.getLogger(f"{LOGGER_ROOT}.{channel}")
        self._history: List[str] = []

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def info(self, message: str) -> None:
        self._emit(logging.INFO, "Info", message)

    def warning(self, message: str) -> None:
        self._emit(logging.WARNING, "Warning", message)

    def error(self, message: str) -> None:
        self._emit(logging.ERROR, "Error", message)

    def flush(self) -> None:
        for handler in self._logger.handlers:
            handler.flush()
        self._history.clear()

    def show(self) -> str:
        return "\n".join(self._history)

    def _emit(self, level: int, label: str, message: str) -> None:
        head = f"[{CHANNEL_NAME}] {self.prefix} " if self.prefix else f"[{CHANNEL_NAME}] "
        line = f"{head}{label}: {message}"
        self._history.append(line)
        self._logger.log(level, line)


def configure_logging(verbose: bool = False) -> None:
    root = logging.getLogger(LOGGER_ROOT)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(handler.get_name() == LOGGER_ROOT for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(LOGGER_ROOT)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)


__all__ = ["ChannelLogger", "configure_logging"]
