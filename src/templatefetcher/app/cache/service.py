"""Create and delete the staging folder attached to a template."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable

from templatefetcher.domain.cache_name import generate_cache_name
from templatefetcher.domain.errors import CacheError, CacheMissingError, CacheRootError
from templatefetcher.domain.result import Err
from templatefetcher.domain.template import Template
from templatefetcher.ports.logger import FetchLogger
from templatefetcher.ports.template_store import TemplateStore


class CacheManager:
    """Owns the ``<cache root>/<cache name>`` folders of templates.

    The cache root comes from the template store; every successful change to
    a template's ``cache_name`` is persisted before it is returned.
    """

    def __init__(
        self,
        store: TemplateStore,
        logger: FetchLogger,
        *,
        name_factory: Callable[[], str] = generate_cache_name,
    ) -> None:
        self._store = store
        self._logger = logger
        self._name_factory = name_factory

    def cache_root(self) -> Path:
        result = self._store.get_cache_path()
        if isinstance(result, Err):
            raise CacheRootError(f"Template cache directory unavailable: {result.error.describe()}")
        return result.value

    def cache_path(self, template: Template) -> Path | None:
        if template.cache_name is None:
            return None
        return self.cache_root() / template.cache_name

    def set_cache_root(self, path: Path) -> Path:
        resolved = path.expanduser().resolve()
        if not resolved.is_dir():
            raise CacheRootError(f"{resolved} is not an existing directory")
        self._store.set_cache_path(resolved)
        self._logger.info(f"The cache directory has been updated to {resolved}")
        return resolved

    def new_cache(self, template: Template) -> Template:
        if template.cache_name is not None:
            raise CacheError(f"'{template.name}' template already has a cache ({template.cache_name})")
        root = self.cache_root()
        cache_name = self._name_factory()
        cache_path = root / cache_name
        try:
            cache_path.mkdir()
        except OSError as exc:
            raise CacheError(f"Failed to create {cache_path}: {exc.strerror or exc}") from exc
        updated = template.with_cache_name(cache_name)
        self._store.create_or_update_template(updated)
        self._logger.info(f"'{template.name}' template cache has been created at {cache_path}")
        return updated

    def delete_cache(self, template: Template) -> Template:
        """Remove the cache folder and clear ``cache_name``.

        A folder that is already gone raises :class:`CacheMissingError` and
        leaves the stored record untouched. Any other removal failure still
        clears the record before raising.
        """

        if template.cache_name is None:
            raise CacheError(f"'{template.name}' template has no cache")
        cache_path = self.cache_root() / template.cache_name
        if not cache_path.exists():
            raise CacheMissingError(cache_path)
        cleared = template.with_cache_name(None)
        try:
            shutil.rmtree(cache_path)
        except OSError as exc:
            self._store.create_or_update_template(cleared)
            raise CacheError(f"Failed to delete {cache_path}: {exc.strerror or exc}") from exc
        self._store.create_or_update_template(cleared)
        self._logger.info(f"'{template.name}' template cache has been deleted")
        return cleared


__all__ = ["CacheManager"]
