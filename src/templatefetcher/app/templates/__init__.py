"""Template catalogue management."""

from .service import TemplateCatalogue, TemplateCatalogueError

__all__ = ["TemplateCatalogue", "TemplateCatalogueError"]
