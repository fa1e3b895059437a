"""Domain exports."""

from .discard import DiscardResult, discard_leading_directories
from .resolver import probe_kind, resolve_kind
from .template import Template, TemplateKind
from .uri import Uri, UriTransport, classify

__all__ = [
    "DiscardResult",
    "Template",
    "TemplateKind",
    "Uri",
    "UriTransport",
    "classify",
    "discard_leading_directories",
    "probe_kind",
    "resolve_kind",
]
