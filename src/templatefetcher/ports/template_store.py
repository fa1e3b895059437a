"""Port definitions for persisted template settings."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List

from templatefetcher.domain.errors import TemplateFetcherError
from templatefetcher.domain.result import Result
from templatefetcher.domain.template import Template


class TemplateStoreError(TemplateFetcherError):
    """Raised when the settings file cannot be read or written."""


class CachePathError(str, Enum):
    INVALID_PATH = "invalid_path"
    NOT_A_DIRECTORY = "not_a_directory"
    PATH_NOT_SET = "path_not_set"

    def describe(self) -> str:
        return {
            CachePathError.INVALID_PATH: "the configured cache path does not exist",
            CachePathError.NOT_A_DIRECTORY: "the configured cache path is not a directory",
            CachePathError.PATH_NOT_SET: "no cache path is configured",
        }[self]


@dataclass
class TemplateSelection:
    valid_templates: Dict[str, Template] = field(default_factory=dict)
    invalid_template_errors: List[str] = field(default_factory=list)


class TemplateStore(ABC):
    @abstractmethod
    def get_templates(self) -> TemplateSelection:
        """Return every stored template, splitting valid records from errors."""

    @abstractmethod
    def create_or_update_template(self, template: Template) -> None:
        """Persist ``template`` under its name."""

    @abstractmethod
    def delete_template(self, template: Template) -> bool:
        """Remove the record; ``False`` when no record had that name."""

    @abstractmethod
    def get_cache_path(self) -> Result[Path, CachePathError]:
        """Return the configured cache root once it is known to be a directory."""

    @abstractmethod
    def set_cache_path(self, path: Path) -> None:
        """Store a new cache root."""


__all__ = ["CachePathError", "TemplateSelection", "TemplateStore", "TemplateStoreError"]
