"""List, add and delete stored templates."""

from __future__ import annotations

from dataclasses import dataclass

from templatefetcher.app.cache import CacheManager
from templatefetcher.domain.errors import CacheError, TemplateFetcherError
from templatefetcher.domain.template import Template
from templatefetcher.ports.logger import FetchLogger
from templatefetcher.ports.template_store import TemplateSelection, TemplateStore


class TemplateCatalogueError(TemplateFetcherError):
    """Raised when a template cannot be found, added or removed."""


@dataclass
class TemplateCatalogue:
    store: TemplateStore
    caches: CacheManager
    logger: FetchLogger

    def list(self) -> TemplateSelection:
        return self.store.get_templates()

    def get(self, name: str) -> Template:
        selection = self.store.get_templates()
        template = selection.valid_templates.get(name.strip())
        if template is not None:
            return template
        for error in selection.invalid_template_errors:
            if f'"{name.strip()}"' in error:
                raise TemplateCatalogueError(error)
        raise TemplateCatalogueError(f"The template '{name}' does not exist")

    def add(self, template: Template) -> Template:
        if template.name in self.store.get_templates().valid_templates:
            raise TemplateCatalogueError(f"The template '{template.name}' already exist")
        self.store.create_or_update_template(template)
        self.logger.info(f"The '{template.name}' template has been successfully added")
        return template

    def delete(self, template: Template) -> None:
        if template.cache_name is not None:
            try:
                self.caches.delete_cache(template)
            except CacheError as exc:
                self.logger.warning(f"Cache of '{template.name}' not removed: {exc}")
        if not self.store.delete_template(template):
            raise TemplateCatalogueError(
                f"Failed to delete the '{template.name}' template (not found in user settings)"
            )
        self.logger.info(f"The {template.name} template has been successfully deleted")


__all__ = ["TemplateCatalogue", "TemplateCatalogueError"]
