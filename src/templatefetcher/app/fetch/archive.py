"""Extract buffered zip and tar archives while stripping leading segments."""

from __future__ import annotations

import io
import os
import tarfile
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, Optional, Tuple

from templatefetcher.domain.errors import (
    ArchiveError,
    EmptyExtractionError,
    UnsupportedArchiveError,
    WriteError,
)
from templatefetcher.ports.logger import FetchLogger


# name, is_dir, mode, payload reader
_Member = Tuple[str, bool, int, Optional[Callable[[], bytes]]]


@dataclass(frozen=True)
class ExtractionSummary:
    file_members: int
    extracted: int
    skipped: int


def strip_member_path(name: str, strip: int) -> Tuple[str, ...] | None:
    """Return the member path without its first ``strip`` segments.

    ``None`` means nothing is left after stripping. Unsafe paths raise.
    """

    normalised = name.replace("\\", "/")
    if normalised.startswith("/") or PurePosixPath(normalised).is_absolute():
        raise ArchiveError(f"archive member '{name}' has an absolute path")
    parts = tuple(part for part in normalised.split("/") if part not in ("", "."))
    if ".." in parts:
        raise ArchiveError(f"archive member '{name}' escapes the target directory")
    if len(parts) <= strip:
        return None
    return parts[strip:]


class ArchiveExtractor:
    def __init__(self, logger: FetchLogger) -> None:
        self._logger = logger

    def extract(self, data: bytes, target: Path, *, strip: int = 0) -> ExtractionSummary:
        self._logger.info("Extracting files...")
        file_members = 0
        extracted = 0
        skipped = 0
        for name, is_dir, mode, read in self._members(data):
            if not is_dir:
                file_members += 1
            relative = strip_member_path(name, strip)
            if relative is None:
                if not is_dir:
                    skipped += 1
                continue
            destination = target.joinpath(*relative)
            payload = b""
            if not is_dir:
                try:
                    payload = read()
                except ArchiveError:
                    raise
                except (zipfile.BadZipFile, tarfile.TarError, EOFError, zlib.error) as exc:
                    raise ArchiveError(f"archive member '{name}' cannot be read: {exc}") from exc
                except (NotImplementedError, RuntimeError) as exc:
                    # unsupported compression method or encrypted member
                    raise UnsupportedArchiveError(f"archive member '{name}' cannot be read: {exc}") from exc
            try:
                if is_dir:
                    destination.mkdir(parents=True, exist_ok=True)
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(payload)
                if mode:
                    os.chmod(destination, mode & 0o777)
            except OSError as exc:
                raise WriteError(destination, exc.strerror or str(exc)) from exc
            extracted += 1

        self._logger.info(f"{extracted} files have been extracted")
        if file_members == 0:
            self._logger.warning("The archive does not contain any file")
        elif extracted == 0:
            raise EmptyExtractionError(
                f"no file left to extract after discarding {strip} leading directories "
                f"({file_members} files in archive)"
            )
        return ExtractionSummary(file_members=file_members, extracted=extracted, skipped=skipped)

    def _members(self, data: bytes) -> Iterator[_Member]:
        buffer = io.BytesIO(data)
        if zipfile.is_zipfile(buffer):
            buffer.seek(0)
            yield from self._zip_members(buffer)
            return
        buffer.seek(0)
        try:
            archive = tarfile.open(fileobj=buffer, mode="r:*")
        except tarfile.TarError as exc:
            raise UnsupportedArchiveError(
                "unsupported archive format (zip, tar, tar.gz, tar.bz2 and tar.xz are supported)"
            ) from exc
        with archive:
            yield from self._tar_members(archive)

    def _zip_members(self, buffer: io.BytesIO) -> Iterator[_Member]:
        try:
            with zipfile.ZipFile(buffer) as archive:
                for info in archive.infolist():
                    mode = (info.external_attr >> 16) & 0o777
                    yield info.filename, info.is_dir(), mode, (lambda info=info: archive.read(info))
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
            raise ArchiveError(f"corrupted zip archive: {exc}") from exc

    def _tar_members(self, archive: tarfile.TarFile) -> Iterator[_Member]:
        try:
            for member in archive:
                if member.isdir():
                    yield member.name, True, 0, None
                elif member.isfile():
                    yield member.name, False, member.mode, (lambda member=member: _read_tar_member(archive, member))
                else:
                    self._logger.warning(f"Skipping unsupported archive entry '{member.name}'")
        except tarfile.TarError as exc:
            raise ArchiveError(f"corrupted tar archive: {exc}") from exc


def _read_tar_member(archive: tarfile.TarFile, member: tarfile.TarInfo) -> bytes:
    handle = archive.extractfile(member)
    if handle is None:
        raise ArchiveError(f"archive member '{member.name}' cannot be read")
    with handle:
        return handle.read()


__all__ = ["ArchiveExtractor", "ExtractionSummary", "strip_member_path"]
