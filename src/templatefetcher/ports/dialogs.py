"""Port for the interactive collaborator that talks to the user."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from templatefetcher.domain.template import Template


@dataclass(frozen=True)
class SelectTemplateOptions:
    place_holder: str = "Select a template"
    filter: Callable[[Template], bool] | None = None


class Dialogs(ABC):
    @abstractmethod
    def select_template(self, options: SelectTemplateOptions) -> Template | None:
        """Let the user pick a template; ``None`` on cancel."""

    @abstractmethod
    def confirm_directory_depth(self, current: int) -> int:
        """Confirm the discard depth; cancelling returns ``current``."""

    @abstractmethod
    def new_template(self) -> Template | None:
        """Walk the user through creating a template; ``None`` on cancel."""

    @abstractmethod
    def ask_cache_path(self) -> Path | None:
        """Ask for a cache root directory; ``None`` on cancel."""


__all__ = ["Dialogs", "SelectTemplateOptions"]
