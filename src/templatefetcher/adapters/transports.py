"""Retrieve template bytes for every supported URI transport."""

from __future__ import annotations

import ftplib
import io
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlparse

import requests

from templatefetcher.domain.errors import LocalReadError, RemoteFetchError
from templatefetcher.domain.uri import Uri, UriTransport

DEFAULT_TIMEOUT = 60.0
USER_AGENT = "templatefetcher"

FtpFactory = Callable[[], ftplib.FTP]


class TransportRegistry:
    """Buffers the whole resource in memory before handing it back."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        ftp_factory: FtpFactory | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._ftp_factory = ftp_factory or ftplib.FTP
        self._timeout = timeout

    def retrieve(self, uri: Uri) -> bytes:
        if uri.transport.is_local:
            return self._read_local(uri.local_path())
        if uri.transport is UriTransport.HTTP:
            return self._read_http(uri.value)
        if uri.transport is UriTransport.FTP:
            return self._read_ftp(uri.value)
        raise RemoteFetchError(uri.value, f"no transport registered for '{uri.transport.value}'")

    def _read_local(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise LocalReadError(path, exc.strerror or str(exc)) from exc

    def _read_http(self, url: str) -> bytes:
        try:
            with self._session.get(url, headers={"User-Agent": USER_AGENT}, timeout=self._timeout) as response:
                response.raise_for_status()
                # redirects are followed, so any other 3xx or 1xx is unexpected
                if not 200 <= response.status_code < 300:
                    raise RemoteFetchError(url, f"HTTP {response.status_code}")
                return response.content
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "error"
            raise RemoteFetchError(url, f"HTTP {status}") from exc
        except requests.RequestException as exc:
            raise RemoteFetchError(url, str(exc)) from exc

    def _read_ftp(self, url: str) -> bytes:
        parsed = urlparse(url)
        if not parsed.hostname:
            raise RemoteFetchError(url, "missing host")
        remote_path = unquote(parsed.path)
        if not remote_path or remote_path.endswith("/"):
            raise RemoteFetchError(url, "FTP URI must point to a file")
        buffer = io.BytesIO()
        ftp = self._ftp_factory()
        try:
            ftp.connect(parsed.hostname, parsed.port or 21, timeout=self._timeout)
            ftp.login(unquote(parsed.username or "anonymous"), unquote(parsed.password or ""))
            ftp.retrbinary(f"RETR {remote_path}", buffer.write)
        except ftplib.all_errors as exc:
            raise RemoteFetchError(url, str(exc)) from exc
        finally:
            try:
                ftp.quit()
            except ftplib.all_errors:
                ftp.close()
        return buffer.getvalue()


__all__ = ["TransportRegistry"]
