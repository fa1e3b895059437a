"""Template record: the validated description of one fetchable artifact."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

from .errors import TemplateValidationError, UriValidationError
from .uri import Uri

CACHE_NAME_LENGTH = 21
_CACHE_NAME_PATTERN = re.compile(r"^[0-9]")


class TemplateKind(str, Enum):
    # written as one file named after the source
    FILE = "file"
    # copied tree, minus the discarded leading directories
    DIRECTORY = "directory"
    # extracted bytes, minus the discarded leading path segments
    ARCHIVE = "archive"


def validate_cache_name(value: str | None, *, name: str | None = None) -> None:
    if value is None:
        return
    if not isinstance(value, str) or len(value) != CACHE_NAME_LENGTH:
        raise TemplateValidationError("cacheName", f"Must be {CACHE_NAME_LENGTH} characters long", name=name)
    if not _CACHE_NAME_PATTERN.match(value):
        raise TemplateValidationError("cacheName", "Must start with a digit", name=name)


@dataclass(frozen=True)
class Template:
    name: str
    uri: Uri
    is_archive: bool = False
    discarded_leading_directories: int = 0
    cache_name: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise TemplateValidationError("name", "A template name can not be empty")
        object.__setattr__(self, "name", self.name.strip())
        if not isinstance(self.uri, Uri):
            raise TemplateValidationError("uri", "URI field is mandatory in order to fetch project template", name=self.name)
        if not isinstance(self.is_archive, bool):
            raise TemplateValidationError("isArchive", "Must be a boolean", name=self.name)
        depth = self.discarded_leading_directories
        if isinstance(depth, bool) or not isinstance(depth, int):
            raise TemplateValidationError("discardedLeadingDirectories", "Must be an integer", name=self.name)
        if depth < 0:
            raise TemplateValidationError(
                "discardedLeadingDirectories", "The directory depth can not have a negative value", name=self.name
            )
        validate_cache_name(self.cache_name, name=self.name)

    @classmethod
    def create(
        cls,
        name: str,
        uri: str,
        *,
        is_archive: bool = False,
        discarded_leading_directories: int = 0,
        cache_name: str | None = None,
    ) -> "Template":
        try:
            parsed = Uri.parse(uri)
        except UriValidationError as exc:
            raise TemplateValidationError("uri", str(exc), name=name.strip() if isinstance(name, str) else None) from exc
        return cls(
            name=name,
            uri=parsed,
            is_archive=is_archive,
            discarded_leading_directories=discarded_leading_directories,
            cache_name=cache_name,
        )

    @classmethod
    def from_config(cls, name: str, payload: Mapping[str, Any]) -> "Template":
        if not isinstance(payload, Mapping):
            raise TemplateValidationError("uri", "Template entry must be a mapping", name=name)
        uri = payload.get("uri")
        if uri is None:
            raise TemplateValidationError("uri", "URI field is mandatory in order to fetch project template", name=name)
        depth = payload.get("discardedLeadingDirectories")
        is_archive = payload.get("isArchive")
        return cls.create(
            name,
            str(uri),
            is_archive=False if is_archive is None else is_archive,
            discarded_leading_directories=0 if depth is None else depth,
            cache_name=payload.get("cacheName") or None,
        )

    def to_config(self) -> dict[str, Any]:
        return {
            "uri": self.uri.value,
            "discardedLeadingDirectories": self.discarded_leading_directories,
            "isArchive": self.is_archive,
            "cacheName": self.cache_name,
        }

    def with_cache_name(self, cache_name: str | None) -> "Template":
        return replace(self, cache_name=cache_name)

    def with_discard_depth(self, depth: int) -> "Template":
        return replace(self, discarded_leading_directories=depth)


__all__ = ["CACHE_NAME_LENGTH", "Template", "TemplateKind", "validate_cache_name"]
