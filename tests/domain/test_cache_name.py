from __future__ import annotations

from datetime import datetime

from templatefetcher.domain.cache_name import generate_cache_name
from templatefetcher.domain.template import CACHE_NAME_LENGTH, Template


class _FixedRandom:
    def __init__(self, value: int) -> None:
        self.value = value

    def randint(self, low: int, high: int) -> int:
        assert (low, high) == (0, 9999)
        return self.value


def test_layout_is_timestamp_then_suffix() -> None:
    moment = datetime(2024, 3, 5, 7, 8, 9, 123456)
    assert generate_cache_name(moment, _FixedRandom(42)) == "20240305070809123" + "0042"


def test_generated_names_are_valid_cache_names() -> None:
    for _ in range(20):
        name = generate_cache_name()
        assert len(name) == CACHE_NAME_LENGTH
        assert name[0].isdigit()
        Template.create("web", "/tmp/web", cache_name=name)
