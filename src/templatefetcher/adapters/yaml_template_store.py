"""YAML settings file backing the template store port."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict

import yaml

from templatefetcher.domain.errors import ValidationError
from templatefetcher.domain.result import Err, Ok, Result
from templatefetcher.domain.template import Template
from templatefetcher.ports.template_store import (
    CachePathError,
    TemplateSelection,
    TemplateStore,
    TemplateStoreError,
)

TEMPLATES_KEY = "templates"
CACHE_PATH_KEY = "cachePath"


class YamlTemplateStore(TemplateStore):
    """Stores templates as a name keyed mapping in a single YAML document."""

    def __init__(self, settings_file: Path) -> None:
        self._path = settings_file

    @property
    def path(self) -> Path:
        return self._path

    def get_templates(self) -> TemplateSelection:
        selection = TemplateSelection()
        raw_templates = self._load().get(TEMPLATES_KEY) or {}
        if not isinstance(raw_templates, dict):
            selection.invalid_template_errors.append(f"'{TEMPLATES_KEY}' must be a mapping of template names")
            return selection
        for name, payload in raw_templates.items():
            if payload is None:
                continue
            try:
                template = Template.from_config(str(name), payload)
            except ValidationError as exc:
                selection.invalid_template_errors.append(str(exc))
                continue
            selection.valid_templates[template.name] = template
        return selection

    def create_or_update_template(self, template: Template) -> None:
        data = self._load()
        templates = data.get(TEMPLATES_KEY)
        if not isinstance(templates, dict):
            templates = {}
        templates[template.name] = template.to_config()
        data[TEMPLATES_KEY] = templates
        self._store(data)

    def delete_template(self, template: Template) -> bool:
        data = self._load()
        templates = data.get(TEMPLATES_KEY)
        if not isinstance(templates, dict) or template.name not in templates:
            return False
        del templates[template.name]
        self._store(data)
        return True

    def get_cache_path(self) -> Result[Path, CachePathError]:
        raw = self._load().get(CACHE_PATH_KEY)
        if not raw:
            return Err(CachePathError.PATH_NOT_SET)
        cache_path = Path(str(raw)).expanduser()
        try:
            mode = cache_path.stat().st_mode
        except OSError:
            return Err(CachePathError.INVALID_PATH)
        if not stat.S_ISDIR(mode):
            return Err(CachePathError.NOT_A_DIRECTORY)
        return Ok(cache_path)

    def set_cache_path(self, path: Path) -> None:
        data = self._load()
        data[CACHE_PATH_KEY] = str(path)
        self._store(data)

    def _load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise TemplateStoreError(f"settings file {self._path} is not valid YAML: {exc}") from exc
        except OSError as exc:
            raise TemplateStoreError(f"settings file {self._path} cannot be read: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise TemplateStoreError(f"settings file {self._path} must contain a mapping")
        return data

    def _store(self, data: Dict[str, Any]) -> None:
        payload = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".settings-", suffix=".yaml", dir=self._path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise TemplateStoreError(f"settings file {self._path} cannot be written: {exc}") from exc


__all__ = ["YamlTemplateStore"]
