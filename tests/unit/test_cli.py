"""
Tests for the command line interface.
"""

import logging
import sqlite3
from pathlib import Path

import httpx
import pytest
import structlog
from click.testing import CliRunner

from pagehound import __version__
from pagehound.__main__ import build_quick_scan, main
from pagehound.core.transport import HttpxTransport
from pagehound.handlers import LinkAppender, StringMatch
from pagehound.sinks import SqliteLogSink


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run in a scratch directory and undo the CLI's logging setup."""
    monkeypatch.chdir(tmp_path)
    root_handlers = logging.root.handlers[:]
    root_level = logging.root.level
    yield
    logging.root.handlers[:] = root_handlers
    logging.root.setLevel(root_level)
    structlog.reset_defaults()


@pytest.fixture
def site_transport(mock_site, monkeypatch: pytest.MonkeyPatch):
    """Route every engine-created transport to the mock site."""
    def factory(config=None, **kwargs):
        return HttpxTransport(config, transport=httpx.MockTransport(mock_site.handler), **kwargs)

    monkeypatch.setattr("pagehound.core.engine.HttpxTransport", factory)
    return mock_site


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestCliBasics:
    """Tests for help, version and usage errors."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "--savecookies" in result.output
        assert "--delay" in result.output

    def test_missing_url(self, runner: CliRunner) -> None:
        result = runner.invoke(main, [])

        assert result.exit_code == 1

    def test_negative_delay(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["-d", "-1", "http://a.test/"])

        assert result.exit_code == 1

    def test_invalid_url(self, runner: CliRunner, site_transport) -> None:
        result = runner.invoke(main, ["ftp://a.test/"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert site_transport.requests == []
        assert "Performed a total of 0 HTTP requests." in result.output

    def test_bad_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "crawl.yaml"
        path.write_text("other:\n  engine: {}\n", encoding="utf-8")

        result = runner.invoke(main, ["-c", str(path), "http://a.test/"])

        assert result.exit_code == 1
        assert "Section 'default' not found" in result.output
        assert "Performed a total of 0 HTTP requests." in result.output


class TestQuickScan:
    """Tests for the built-in scan setup."""

    def test_build_quick_scan(self, tmp_path: Path) -> None:
        engine = build_quick_scan(
            "http://www.a.test/start",
            log_file=str(tmp_path / "scan.sq3"),
            delay=0.0,
            save_cookies=False,
            lifo=True,
            matches=("error", "warning"),
            http_opts={},
        )

        handlers = engine.handlers
        assert isinstance(handlers[0], LinkAppender)
        assert handlers[0].domain == "www.a.test"
        assert [h.match for h in handlers[1:]] == ["error", "warning"]
        assert all(isinstance(h, StringMatch) and h.match_case is False for h in handlers[1:])
        assert handlers[1].status == (200,)
        assert "text/html; charset=utf-8" in handlers[1].content_type
        assert isinstance(engine.log_sink, SqliteLogSink)
        assert engine.queue.lifo is True
        engine.log_sink.close()

    def test_scan_writes_sqlite_log(self, runner: CliRunner, site_transport, tmp_path: Path) -> None:
        site_transport.add("http://a.test/", '<a href="/status">s</a><a href="http://b.test/">b</a>')
        site_transport.add(
            "http://a.test/status",
            "<p>Warning: disk almost full</p>",
            content_type="text/html; charset=utf-8",
        )

        result = runner.invoke(main, ["-l", "scan.sq3", "http://a.test/"])

        assert result.exit_code == 0, result.output
        assert "Performed a total of 2 HTTP requests." in result.output
        assert "http://b.test/" not in site_transport.requested_urls

        with sqlite3.connect(tmp_path / "scan.sq3") as conn:
            rows = conn.execute(
                "SELECT r.url, m.handler, m.key, m.value FROM messages m "
                "JOIN requests r ON r.id = m.request_id WHERE m.key = 'offset'"
            ).fetchall()
        assert rows == [("http://a.test/status", "StringMatch:warning", "offset", "3")]

    def test_custom_matches(self, runner: CliRunner, site_transport, tmp_path: Path) -> None:
        site_transport.add("http://a.test/", "<p>Deprecated API</p>")

        result = runner.invoke(main, ["-m", "deprecated", "http://a.test/"])

        assert result.exit_code == 0, result.output
        with sqlite3.connect(tmp_path / "pagehound.sq3") as conn:
            handlers = conn.execute("SELECT DISTINCT handler FROM messages").fetchall()
        assert handlers == [("StringMatch:deprecated",)]


class TestConfiguredCrawl:
    """Tests for crawls set up from a crawl file."""

    def test_config_file_crawl(self, runner: CliRunner, site_transport, tmp_path: Path) -> None:
        site_transport.add("http://a.test/", '<a href="/1">1</a>')
        site_transport.add("http://a.test/1", "<html><head></head></html>")
        (tmp_path / "crawl.yaml").write_text(
            "staging:\n"
            "  logger:\n"
            "    type: sqlite\n"
            "    options:\n"
            "      dbfile: staging.sq3\n"
            "  handlers:\n"
            "    links:\n"
            "      type: LinkAppender\n"
            "    title:\n"
            "      type: NotXPath\n"
            "      options:\n"
            "        query: //title\n"
            "        message: Page has no title\n",
            encoding="utf-8",
        )

        result = runner.invoke(main, ["-c", "crawl.yaml", "-s", "staging", "http://a.test/"])

        assert result.exit_code == 0, result.output
        assert "Performed a total of 2 HTTP requests." in result.output

        with sqlite3.connect(tmp_path / "staging.sq3") as conn:
            messages = conn.execute(
                "SELECT value FROM messages WHERE handler = 'title' AND key = 'message'"
            ).fetchall()
        assert messages == [("Page has no title",), ("Page has no title",)]

    def test_unreachable_site_still_counts(self, runner: CliRunner, site_transport) -> None:
        site_transport.failures.add("http://a.test/")

        result = runner.invoke(main, ["http://a.test/"])

        assert result.exit_code == 0, result.output
        assert "Performed a total of 1 HTTP requests." in result.output
