from __future__ import annotations

import logging

import pytest

from templatefetcher.adapters.channel_logger import ChannelLogger, configure_logging


def test_lines_are_prefixed_and_kept(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="templatefetcher")
    logger = ChannelLogger("[Fetcher]")
    logger.info("starting")
    logger.warning("careful")
    logger.error("boom")

    assert logger.history == [
        "[Template Fetcher] [Fetcher] Info: starting",
        "[Template Fetcher] [Fetcher] Warning: careful",
        "[Template Fetcher] [Fetcher] Error: boom",
    ]
    assert [record.name for record in caplog.records] == ["templatefetcher.fetcher"] * 3
    assert [record.levelno for record in caplog.records] == [logging.INFO, logging.WARNING, logging.ERROR]
    assert "boom" in logger.show()


def test_flush_clears_history() -> None:
    logger = ChannelLogger()
    logger.info("one")
    logger.flush()
    assert logger.history == []
    logger.info("two")
    assert logger.history == ["[Template Fetcher] Info: two"]


def test_configure_logging_is_idempotent() -> None:
    configure_logging()
    configure_logging(verbose=True)
    root = logging.getLogger("templatefetcher")
    assert sum(1 for handler in root.handlers if handler.get_name() == "templatefetcher") == 1
    assert root.level == logging.DEBUG
