"""Runtime settings for the template fetcher."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from templatefetcher import __version__

HOME_ENV = "TEMPLATEFETCHER_HOME"
HTTP_TIMEOUT_ENV = "TEMPLATEFETCHER_HTTP_TIMEOUT"
DEFAULT_HTTP_TIMEOUT = 60.0


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    state_dir: Path
    log_dir: Path
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    cli_version: str = __version__

    @property
    def settings_file(self) -> Path:
        return self.home_dir / "settings.yaml"


def _default_home_dir() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".templatefetcher"


def _http_timeout() -> float:
    raw = os.environ.get(HTTP_TIMEOUT_ENV, "").strip()
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    return RuntimeSettings(
        home_dir=base,
        state_dir=base / "state",
        log_dir=base / "logs",
        http_timeout=_http_timeout(),
    )


SETTINGS = load_settings()
