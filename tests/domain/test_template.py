from __future__ import annotations

import pytest

from templatefetcher.domain.errors import TemplateValidationError
from templatefetcher.domain.template import CACHE_NAME_LENGTH, Template
from templatefetcher.domain.uri import UriTransport


def test_create_strips_name_and_parses_uri() -> None:
    template = Template.create("  web  ", "https://example.com/web.zip", is_archive=True, discarded_leading_directories=1)
    assert template.name == "web"
    assert template.uri.transport is UriTransport.HTTP
    assert template.is_archive is True
    assert template.cache_name is None


def test_empty_name_is_rejected() -> None:
    with pytest.raises(TemplateValidationError) as excinfo:
        Template.create("   ", "/tmp/x")
    assert excinfo.value.field == "name"


def test_negative_depth_is_rejected() -> None:
    with pytest.raises(TemplateValidationError) as excinfo:
        Template.create("web", "/tmp/x", discarded_leading_directories=-1)
    assert str(excinfo.value).startswith('On template "web":"discardedLeadingDirectories"')


def test_boolean_depth_is_rejected() -> None:
    with pytest.raises(TemplateValidationError):
        Template.create("web", "/tmp/x", discarded_leading_directories=True)


def test_unsupported_uri_becomes_template_error() -> None:
    with pytest.raises(TemplateValidationError) as excinfo:
        Template.create("web", "ftps://host/x")
    assert excinfo.value.field == "uri"
    assert excinfo.value.name == "web"


def test_from_config_requires_uri() -> None:
    with pytest.raises(TemplateValidationError) as excinfo:
        Template.from_config("web", {"isArchive": False})
    assert excinfo.value.field == "uri"


def test_from_config_defaults() -> None:
    template = Template.from_config("web", {"uri": "/tmp/web", "cacheName": ""})
    assert template.discarded_leading_directories == 0
    assert template.is_archive is False
    assert template.cache_name is None


def test_from_config_rejects_non_boolean_archive_flag() -> None:
    with pytest.raises(TemplateValidationError) as excinfo:
        Template.from_config("web", {"uri": "/tmp/web", "isArchive": "yes"})
    assert excinfo.value.field == "isArchive"


def test_cache_name_is_validated() -> None:
    with pytest.raises(TemplateValidationError):
        Template.create("web", "/tmp/web", cache_name="short")
    with pytest.raises(TemplateValidationError):
        Template.create("web", "/tmp/web", cache_name="x" * CACHE_NAME_LENGTH)
    template = Template.create("web", "/tmp/web", cache_name="2" * CACHE_NAME_LENGTH)
    assert template.cache_name == "2" * CACHE_NAME_LENGTH


def test_to_config_matches_settings_keys() -> None:
    template = Template.create("web", "/tmp/web", discarded_leading_directories=2)
    assert template.to_config() == {
        "uri": "/tmp/web",
        "discardedLeadingDirectories": 2,
        "isArchive": False,
        "cacheName": None,
    }
    assert Template.from_config("web", template.to_config()) == template


def test_with_discard_depth_revalidates() -> None:
    template = Template.create("web", "/tmp/web")
    assert template.with_discard_depth(3).discarded_leading_directories == 3
    assert template.discarded_leading_directories == 0
    with pytest.raises(TemplateValidationError):
        template.with_discard_depth(-2)
