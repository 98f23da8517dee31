import faulthandler

import pytest
import uvicorn

import run_server
from fuel_ledger.core import logging_config


@pytest.fixture
def crash_log(tmp_path, monkeypatch):
    path = tmp_path / "ledger_crash.log"
    monkeypatch.setattr(run_server, "CRASH_LOG", path)
    monkeypatch.setattr(faulthandler, "enable", lambda *a, **k: None)
    return path


def test_startup_failure_is_recorded_and_exits_nonzero(crash_log, monkeypatch, capsys):
    def boom():
        raise RuntimeError("port already in use")

    monkeypatch.setattr(run_server, "serve", boom)

    assert run_server.main() == 1

    log = crash_log.read_text(encoding="utf-8")
    assert "--- start " in log
    assert "RuntimeError: port already in use" in log
    assert "port already in use" in capsys.readouterr().out


def test_serve_hands_logging_to_the_ledger_handlers(crash_log, monkeypatch):
    calls = {}
    monkeypatch.setattr(logging_config, "configure_logging", lambda: calls.setdefault("logging", True))
    monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.update(app=app, **kwargs))

    assert run_server.main() == 0

    from main import app
    assert calls["logging"] is True
    assert calls["app"] is app
    assert calls["log_config"] is None
    assert calls["reload"] is False
    assert "listen=" in crash_log.read_text(encoding="utf-8")
