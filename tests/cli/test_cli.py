from __future__ import annotations

import builtins
import json
from pathlib import Path
from typing import Iterable

import pytest

from templatefetcher import __version__
from templatefetcher.cli import main as cli_main
from templatefetcher.settings import RuntimeSettings


@pytest.fixture()
def runtime_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> RuntimeSettings:
    base = tmp_path / "runtime"
    home = base / "home"
    state_dir = base / "state"
    log_dir = base / "logs"
    for directory in (home, state_dir, log_dir):
        directory.mkdir(parents=True, exist_ok=True)
    settings = RuntimeSettings(
        home_dir=home,
        state_dir=state_dir,
        log_dir=log_dir,
        http_timeout=5.0,
        cli_version=__version__,
    )
    monkeypatch.setattr(cli_main, "SETTINGS", settings, raising=False)
    monkeypatch.setattr(cli_main, "configure_logging", lambda verbose=False: None)
    return settings


def _answers(monkeypatch: pytest.MonkeyPatch, answers: Iterable[str]) -> None:
    pending = list(answers)

    def _input(prompt: str = "") -> str:
        if not pending:
            raise EOFError(prompt)
        return pending.pop(0)

    monkeypatch.setattr(builtins, "input", _input)


def _wrapped_source(tmp_path: Path) -> Path:
    source = tmp_path / "source"
    (source / "wrapper").mkdir(parents=True)
    (source / "wrapper" / "a.txt").write_text("a", encoding="utf-8")
    (source / "wrapper" / "b.txt").write_text("b", encoding="utf-8")
    return source


def _target(tmp_path: Path) -> Path:
    target = tmp_path / "target"
    target.mkdir()
    return target


def test_add_and_list(runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["add", "web", "https://example.com/web.zip", "--archive", "--depth", "1"]) == 0
    assert runtime_settings.settings_file.exists()
    capsys.readouterr()

    assert cli_main.main(["list"]) == 0
    out = capsys.readouterr().out
    assert "web\thttps://example.com/web.zip [archive, depth=1]" in out

    assert cli_main.main(["list", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["templates"][0]["name"] == "web"
    assert payload["templates"][0]["transport"] == "http"
    assert payload["errors"] == []


def test_add_rejects_unsupported_scheme(runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["add", "web", "ftps://host/x"]) == 1
    assert "unsupported protocol" in capsys.readouterr().err


def test_add_refuses_duplicate(runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["add", "web", "/srv/web"]) == 0
    assert cli_main.main(["add", "web", "/srv/other"]) == 1
    assert "already exist" in capsys.readouterr().err


def test_negative_depth_is_a_usage_error(runtime_settings: RuntimeSettings) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["add", "web", "/srv/web", "--depth", "-1"])
    assert excinfo.value.code == 2


def test_fetch_by_name(tmp_path: Path, runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    source = _wrapped_source(tmp_path)
    target = _target(tmp_path)
    assert cli_main.main(["add", "wrapped", str(source), "--depth", "1"]) == 0
    capsys.readouterr()

    assert cli_main.main(["fetch", "wrapped", "--target", str(target), "--yes", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["kind"] == "directory"
    assert payload["files"] == 2
    assert sorted(entry.name for entry in target.iterdir()) == ["a.txt", "b.txt"]


def test_fetch_depth_override_is_not_persisted(
    tmp_path: Path, runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _wrapped_source(tmp_path)
    target = _target(tmp_path)
    cli_main.main(["add", "wrapped", str(source), "--depth", "1"])

    assert cli_main.main(["fetch", "wrapped", "--target", str(target), "--depth", "0"]) == 0
    assert (target / "source" / "wrapper" / "a.txt").exists()

    capsys.readouterr()
    cli_main.main(["list", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["templates"][0]["discardedLeadingDirectories"] == 1


def test_fetch_interactive_into_cwd(
    tmp_path: Path, runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch
) -> None:
    source = _wrapped_source(tmp_path)
    target = _target(tmp_path)
    cli_main.main(["add", "wrapped", str(source), "--depth", "1"])
    monkeypatch.chdir(target)
    _answers(monkeypatch, ["1", ""])

    assert cli_main.main(["fetch"]) == 0
    assert (target / "a.txt").read_text(encoding="utf-8") == "a"


def test_fetch_cancelled_selection(
    tmp_path: Path, runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch
) -> None:
    cli_main.main(["add", "web", "/srv/web"])
    _answers(monkeypatch, [""])
    assert cli_main.main(["fetch", "--target", str(_target(tmp_path))]) == 1


def test_fetch_without_templates(runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["fetch", "--yes"]) == 1
    assert "no templates defined" in capsys.readouterr().err


def test_fetch_unknown_template(
    tmp_path: Path, runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]
) -> None:
    cli_main.main(["add", "web", "/srv/web"])
    assert cli_main.main(["fetch", "nope", "--target", str(_target(tmp_path))]) == 1
    assert "does not exist" in capsys.readouterr().err


def test_fetch_resolution_failure(
    tmp_path: Path, runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]
) -> None:
    cli_main.main(["add", "gone", str(tmp_path / "missing")])
    assert cli_main.main(["fetch", "gone", "--target", str(_target(tmp_path)), "--yes"]) == 1
    assert "Cannot resolve template" in capsys.readouterr().err


def test_kind(tmp_path: Path, runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    cli_main.main(["add", "src", str(tmp_path)])
    cli_main.main(["add", "remote", "http://host/a.zip", "--archive"])
    capsys.readouterr()

    assert cli_main.main(["kind", "src"]) == 0
    assert capsys.readouterr().out.strip() == "directory"
    assert cli_main.main(["kind", "remote"]) == 0
    assert capsys.readouterr().out.strip() == "archive"


def test_new_interactive(runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    _answers(monkeypatch, ["docs", "d", "/srv/docs", "2"])
    assert cli_main.main(["new"]) == 0
    _answers(monkeypatch, [])
    assert cli_main.main(["new"]) == 1


def test_delete(runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    cli_main.main(["add", "web", "/srv/web"])
    assert cli_main.main(["delete", "web"]) == 0
    assert cli_main.main(["delete", "web"]) == 1
    capsys.readouterr()
    cli_main.main(["list"])
    assert "No templates defined" in capsys.readouterr().out


def test_cache_commands(tmp_path: Path, runtime_settings: RuntimeSettings, capsys: pytest.CaptureFixture[str]) -> None:
    cli_main.main(["add", "web", "https://example.com/web.zip", "--archive"])
    assert cli_main.main(["cache", "new", "web"]) == 1
    assert "no cache path is configured" in capsys.readouterr().err

    cache_root = tmp_path / "caches"
    cache_root.mkdir()
    assert cli_main.main(["cache", "dir", str(cache_root)]) == 0
    assert cli_main.main(["cache", "new", "web"]) == 0
    assert len(list(cache_root.iterdir())) == 1

    assert cli_main.main(["cache", "delete", "web"]) == 0
    assert list(cache_root.iterdir()) == []
    assert cli_main.main(["cache", "delete", "web"]) == 1


def test_cache_dir_shows_current_root(
    tmp_path: Path, runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    cache_root = tmp_path / "caches"
    cache_root.mkdir()
    cli_main.main(["cache", "dir", str(cache_root)])
    capsys.readouterr()
    _answers(monkeypatch, [""])

    assert cli_main.main(["cache", "dir"]) == 0
    assert capsys.readouterr().out.strip() == str(cache_root.resolve())


def test_telemetry_report_and_clear(
    runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TEMPLATEFETCHER_TELEMETRY", "1")
    cli_main.main(["add", "web", "/srv/web"])
    cli_main.main(["add", "web", "/srv/web"])
    log_path = runtime_settings.log_dir / "telemetry.jsonl"
    assert log_path.exists()
    capsys.readouterr()

    assert cli_main.main(["telemetry", "report"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["by_event"] == {"add": 2}
    assert report["by_status"] == {"ok": 1, "failed": 1}

    assert cli_main.main(["telemetry", "clear"]) == 0
    assert not log_path.exists()


def test_telemetry_report_for_fetch_events(
    tmp_path: Path, runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TEMPLATEFETCHER_TELEMETRY", "1")
    source = _wrapped_source(tmp_path)
    cli_main.main(["add", "wrapped", str(source), "--depth", "1"])
    assert cli_main.main(["fetch", "wrapped", "--target", str(_target(tmp_path)), "--yes"]) == 0
    capsys.readouterr()

    assert cli_main.main(["telemetry", "report", "--event", "fetch"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["by_event"] == {"fetch": 1}
    assert report["fetch"]["by_kind"] == {"directory": 1}
    assert report["fetch"]["by_transport"] == {"none": 1}
    assert report["fetch"]["files"] == 2
