"""Decide whether a template is a file, a directory or an archive."""

from __future__ import annotations

import os
import stat as stat_module
from typing import Callable

from .errors import ResolutionError
from .template import Template, TemplateKind

StatFn = Callable[[str], os.stat_result]


def _fallback_kind(template: Template) -> TemplateKind:
    return TemplateKind.ARCHIVE if template.is_archive else TemplateKind.FILE


def resolve_kind(template: Template, stat: StatFn = os.stat) -> TemplateKind:
    """Resolve the kind, treating an unreadable local path like a plain file.

    Only local transports are probed. A directory always wins over
    ``is_archive``; remote URIs depend on ``is_archive`` alone.
    """

    if not template.uri.transport.is_local:
        return _fallback_kind(template)
    try:
        result = stat(os.fspath(template.uri.local_path()))
    except OSError:
        return _fallback_kind(template)
    if stat_module.S_ISDIR(result.st_mode):
        return TemplateKind.DIRECTORY
    return _fallback_kind(template)


def probe_kind(template: Template, stat: StatFn = os.stat) -> TemplateKind:
    """Same decision as :func:`resolve_kind` but a failed local stat raises."""

    if not template.uri.transport.is_local:
        return _fallback_kind(template)
    path = template.uri.local_path()
    try:
        result = stat(os.fspath(path))
    except OSError as exc:
        raise ResolutionError(path, exc.strerror or str(exc)) from exc
    if stat_module.S_ISDIR(result.st_mode):
        return TemplateKind.DIRECTORY
    return _fallback_kind(template)


__all__ = ["probe_kind", "resolve_kind"]
