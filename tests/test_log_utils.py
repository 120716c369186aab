import json

import pytest

from core.config import Config
from ui import console as console_module
from ui import dashboard as dashboard_module
from ui import log_utils
from ui.console import ConsoleLogger
from ui.dashboard import Dashboard


@pytest.fixture
def cli_log(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "proxy.log"
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", path)
    return path


@pytest.fixture
def request_logs(tmp_path, monkeypatch):
    calls = []

    def _record(method, target_url, status, headers, *, redirect_to=None):
        calls.append((method, target_url, status, headers, redirect_to))

    monkeypatch.setattr(console_module, "write_request_log", _record)
    monkeypatch.setattr(dashboard_module, "write_request_log", _record)
    return calls


def test_request_log_is_grouped_by_host_and_redacted(tmp_path):
    path = log_utils.write_request_log(
        "GET",
        "https://site.test/a",
        200,
        {"cookie": "session=abcdefghijklmnop", "accept": "*/*", "authorization": "short"},
        redirect_to="https://site.test/b",
        log_root=tmp_path,
    )

    assert path.parent == tmp_path / "requests" / "site.test"
    payload = json.loads(path.read_text())
    assert payload["target"] == "https://site.test/a"
    assert payload["status"] == 200
    assert payload["redirect_to"] == "https://site.test/b"
    assert payload["headers"]["cookie"] == "sessio...mnop"
    assert payload["headers"]["authorization"] == "***"
    assert payload["headers"]["accept"] == "*/*"


def test_cli_log_appends_lines(cli_log):
    log_utils.write_cli_log("PROXY", "GET https://site.test/", status=200)
    log_utils.write_cli_log("ERROR", "boom")

    lines = cli_log.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("PROXY: GET https://site.test/ status=200")
    assert lines[1].endswith("ERROR: boom")


def test_clear_logs(tmp_path):
    root = tmp_path / "logs"
    (root / "requests").mkdir(parents=True)
    (root / "proxy.log").write_text("old")

    log_utils.clear_logs(root)

    assert not root.exists()
    log_utils.clear_logs(root)


def test_console_logger_writes_logs(cli_log, request_logs):
    logger = ConsoleLogger()
    logger.log_proxy("GET", "https://site.test/[a]", 302, headers={}, redirect_to="https://site.test/b")
    logger.log_redirect("https://a.test/1", "https://a.test/2", 301)
    logger.log_error("https://down.test/", 502, "refused")

    assert request_logs == [("GET", "https://site.test/[a]", 302, {}, "https://site.test/b")]
    text = cli_log.read_text()
    assert "FOLLOW: https://a.test/1 -> https://a.test/2 status=301" in text
    assert "ERROR: refused route=https://down.test/ status=502" in text


def test_dashboard_tracks_counts(cli_log, request_logs):
    dashboard = Dashboard(Config())
    dashboard.log_proxy("GET", "https://site.test/a", 200, headers={"accept": "*/*"})
    dashboard.log_redirect("https://a.test/1", "https://a.test/2", 302)
    dashboard.log_error("site.test", 404, "Not Found")

    assert dashboard._counts == {"proxied": 1, "followed": 1, "errors": 1}
    assert dashboard._errors == ["site.test 404: Not Found"]
    assert len(request_logs) == 1
    # Layout renders without a live display attached
    dashboard._build_layout()
