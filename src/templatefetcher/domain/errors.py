"""Error taxonomy shared by the fetch pipeline and the cache manager."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class TemplateFetcherError(RuntimeError):
    """Base class for every failure surfaced to callers."""


class ValidationError(TemplateFetcherError, ValueError):
    """Raised when a value object cannot be constructed."""


class TemplateValidationError(ValidationError):
    def __init__(self, field: str, reason: str, *, name: str | None = None) -> None:
        self.field = field
        self.reason = reason
        self.name = name
        label = f'"{name}":"{field}"' if name else f'"{field}"'
        super().__init__(f"On template {label} : {reason}")


class UriValidationError(ValidationError):
    """Raised for empty or otherwise malformed URIs."""


class UnsupportedTransportError(UriValidationError):
    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(
            f"The URI '{uri}' uses an unsupported protocol (accepted: file, http, https, ftp)"
        )


class ResolutionError(TemplateFetcherError):
    """Raised when the kind of a local template cannot be determined."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot resolve template at {path}: {reason}")


class FetchError(TemplateFetcherError):
    """Base class for failures after the template kind was resolved."""


class TransferError(FetchError):
    """Raised when bytes cannot be moved from the source to the destination."""


class RemoteFetchError(TransferError):
    def __init__(self, uri: str, reason: str) -> None:
        self.uri = uri
        self.reason = reason
        super().__init__(f"Failed to retrieve {uri}: {reason}")


class LocalReadError(TransferError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to read {path}: {reason}")


class WriteError(TransferError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")


class DirectoryCopyError(TransferError):
    """Aggregates every entry that failed during a directory copy."""

    def __init__(self, source: Path, failures: Sequence[tuple[str, str, str]]) -> None:
        self.source = source
        self.failures = list(failures)
        lines = [f"When copying directory located at {source}/ :"]
        for src, dst, reason in self.failures:
            lines.append(f"  {src} -> {dst}: {reason}")
        super().__init__("\n".join(lines))


class ArchiveError(FetchError):
    """Raised when an archive cannot be extracted."""


class UnsupportedArchiveError(ArchiveError):
    pass


class EmptyExtractionError(ArchiveError):
    pass


class CacheError(TemplateFetcherError):
    """Raised when a template cache cannot be created or removed."""


class CacheRootError(CacheError):
    pass


class CacheMissingError(CacheError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Template cache directory {path} does not exist")


__all__ = [
    "ArchiveError",
    "CacheError",
    "CacheMissingError",
    "CacheRootError",
    "DirectoryCopyError",
    "EmptyExtractionError",
    "FetchError",
    "LocalReadError",
    "RemoteFetchError",
    "ResolutionError",
    "TemplateFetcherError",
    "TemplateValidationError",
    "TransferError",
    "UnsupportedArchiveError",
    "UnsupportedTransportError",
    "UriValidationError",
    "ValidationError",
    "WriteError",
]
