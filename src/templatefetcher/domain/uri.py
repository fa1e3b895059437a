"""Template location value object and transport classification."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from .errors import UnsupportedTransportError, UriValidationError


class UriTransport(str, Enum):
    NONE = "none"
    FILE = "file"
    HTTP = "http"
    FTP = "ftp"
    UNSUPPORTED = "unsupported"

    @property
    def is_local(self) -> bool:
        return self in (UriTransport.NONE, UriTransport.FILE)

    @property
    def is_remote(self) -> bool:
        return self in (UriTransport.HTTP, UriTransport.FTP)


_LOCAL_HOSTS = ("", "localhost")

# Order matters: the generic scheme pattern must come last.
_TRANSPORT_PATTERNS = (
    (re.compile(r"^file://.*", re.DOTALL), UriTransport.FILE),
    (re.compile(r"^https?://.*", re.DOTALL), UriTransport.HTTP),
    (re.compile(r"^ftp://.*", re.DOTALL), UriTransport.FTP),
    (re.compile(r"^[^/]+://.*", re.DOTALL), UriTransport.UNSUPPORTED),
)


def classify(uri: str) -> UriTransport:
    """Return the transport implied by ``uri``.

    ``http`` stands for both http and https. A string without any scheme
    marker is a bare local path and classifies as ``NONE``.
    """

    for pattern, transport in _TRANSPORT_PATTERNS:
        if pattern.match(uri):
            return transport
    return UriTransport.NONE


@dataclass(frozen=True)
class Uri:
    value: str
    transport: UriTransport

    @classmethod
    def parse(cls, value: str) -> "Uri":
        if not isinstance(value, str) or not value.strip():
            raise UriValidationError("An URI can not be empty")
        transport = classify(value)
        if transport is UriTransport.UNSUPPORTED:
            raise UnsupportedTransportError(value)
        return cls(value=value, transport=transport)

    def __post_init__(self) -> None:
        if self.transport is UriTransport.UNSUPPORTED:
            raise UnsupportedTransportError(self.value)
        if self.transport is UriTransport.FILE and urlparse(self.value).netloc not in _LOCAL_HOSTS:
            raise UriValidationError(
                f"The URI '{self.value}' names a remote host; use file:///absolute/path or file://localhost/absolute/path"
            )

    def __str__(self) -> str:
        return self.value

    def local_path(self) -> Path:
        if self.transport is UriTransport.NONE:
            return Path(self.value).expanduser()
        if self.transport is UriTransport.FILE:
            return Path(url2pathname(urlparse(self.value).path))
        raise UriValidationError(f"The URI '{self.value}' does not point to the local filesystem")

    def basename(self) -> str:
        if self.transport.is_local:
            return self.local_path().name
        path = unquote(urlparse(self.value).path).rstrip("/")
        return posixpath.basename(path)


__all__ = ["Uri", "UriTransport", "classify"]
