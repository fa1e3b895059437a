"""Materialise a template into a target directory."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from templatefetcher.adapters.transports import TransportRegistry
from templatefetcher.domain.discard import discard_leading_directories
from templatefetcher.domain.errors import (
    DirectoryCopyError,
    TemplateFetcherError,
    TransferError,
    WriteError,
)
from templatefetcher.domain.resolver import StatFn, probe_kind
from templatefetcher.domain.template import Template, TemplateKind
from templatefetcher.domain.uri import Uri
from templatefetcher.ports.dialogs import Dialogs
from templatefetcher.ports.logger import FetchLogger

from .archive import ArchiveExtractor


@dataclass(frozen=True)
class FetchReport:
    template: str
    kind: TemplateKind
    destination: Path
    discarded_leading_directories: int
    files: int


class FetchService:
    """Resolve, retrieve and write a template.

    The pipeline is strictly sequential: kind resolution, depth confirmation,
    retrieval, then copy/write/extract. A failure at any stage raises a single
    :class:`~templatefetcher.domain.errors.TemplateFetcherError`. Content that
    already landed in the target is left in place; fetching twice into the same
    directory overwrites files with the same relative path.
    """

    def __init__(
        self,
        logger: FetchLogger,
        *,
        dialogs: Dialogs | None = None,
        transports: TransportRegistry | None = None,
        extractor: ArchiveExtractor | None = None,
        stat: StatFn = os.stat,
    ) -> None:
        self._logger = logger
        self._dialogs = dialogs
        self._transports = transports or TransportRegistry()
        self._extractor = extractor or ArchiveExtractor(logger)
        self._stat = stat

    def resolve_kind(self, template: Template) -> TemplateKind:
        return probe_kind(template, stat=self._stat)

    def fetch(
        self,
        template: Template,
        target_directory: Path,
        *,
        confirm_depth: bool = True,
    ) -> FetchReport:
        """Fetch ``template`` into ``target_directory``.

        When a dialogs collaborator is available the discard depth of
        directory and archive templates is confirmed first. The confirmed
        value applies to this run only; the stored record is not modified.
        """

        self._logger.info(f'Fetching from "{template.uri}" to "{target_directory}"')
        try:
            report = self._fetch(template, Path(target_directory), confirm_depth=confirm_depth)
        except TemplateFetcherError as exc:
            self._logger.error(str(exc))
            raise
        self._logger.info("Done")
        return report

    def fetch_from_directory(self, source: Path, discarded_leading_directories: int, target_directory: Path) -> int:
        try:
            discarded = discard_leading_directories(source, discarded_leading_directories)
        except OSError as exc:
            raise DirectoryCopyError(source, [(str(source), str(target_directory), exc.strerror or str(exc))]) from exc
        destination = target_directory if discarded.copy_only_content else target_directory / discarded.path.name
        self._logger.info(f"Copying {discarded.path} into {destination}")
        try:
            shutil.copytree(discarded.path, destination, dirs_exist_ok=True)
        except shutil.Error as exc:
            failures = [tuple(str(part) for part in failure) for failure in exc.args[0]]
            raise DirectoryCopyError(discarded.path, failures) from exc
        except OSError as exc:
            raise DirectoryCopyError(
                discarded.path, [(str(discarded.path), str(destination), exc.strerror or str(exc))]
            ) from exc
        return sum(1 for candidate in discarded.path.rglob("*") if candidate.is_file())

    def fetch_from_file(
        self,
        uri: Uri,
        target_directory: Path,
        *,
        archive_strip: int | None = None,
    ) -> int:
        data = self._transports.retrieve(uri)
        self._logger.info(f"{len(data)} bytes retrieved")
        if archive_strip is not None:
            summary = self._extractor.extract(data, target_directory, strip=archive_strip)
            return summary.extracted
        destination = target_directory / uri.basename()
        try:
            destination.write_bytes(data)
        except OSError as exc:
            raise WriteError(destination, exc.strerror or str(exc)) from exc
        return 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fetch(self, template: Template, target: Path, *, confirm_depth: bool) -> FetchReport:
        kind = self.resolve_kind(template)
        self._logger.info(f"Template kind: {kind.value}")
        _ensure_target(target)

        depth = template.discarded_leading_directories
        if kind in (TemplateKind.DIRECTORY, TemplateKind.ARCHIVE) and confirm_depth and self._dialogs is not None:
            depth = self._dialogs.confirm_directory_depth(depth)
            # validates the confirmed value without touching the stored record
            depth = template.with_discard_depth(depth).discarded_leading_directories

        if kind is TemplateKind.DIRECTORY:
            files = self.fetch_from_directory(template.uri.local_path(), depth, target)
        elif kind is TemplateKind.ARCHIVE:
            files = self.fetch_from_file(template.uri, target, archive_strip=depth)
        else:
            depth = 0
            files = self.fetch_from_file(template.uri, target)

        return FetchReport(
            template=template.name,
            kind=kind,
            destination=target,
            discarded_leading_directories=depth,
            files=files,
        )


def _ensure_target(target: Path) -> None:
    if not target.exists():
        raise TransferError(f"Target directory {target} does not exist")
    if not target.is_dir():
        raise TransferError(f"Target {target} is not a directory")


__all__ = ["FetchReport", "FetchService"]
