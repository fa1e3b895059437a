"""Template fetch pipeline."""

from .archive import ArchiveExtractor, ExtractionSummary
from .service import FetchReport, FetchService

__all__ = ["ArchiveExtractor", "ExtractionSummary", "FetchReport", "FetchService"]
