"""
CLI entry point for pagehound.

Usage:
    # Quick scan: follow same-domain links, flag pages mentioning
    # "error" or "warning", log to pagehound.sq3
    pagehound https://example.com

    # Crawl setup from a configuration file section
    pagehound -c crawl.yaml -s staging https://example.com
"""

import asyncio
import signal
import sys
import traceback

import click
from rich.console import Console
from rich.markup import escape

from pagehound import __version__
from pagehound.config import build_engine, load_crawl_file, load_settings
from pagehound.core.engine import Engine, EngineConfig
from pagehound.exceptions import CrawlerError
from pagehound.handlers import LinkAppender, StringMatch
from pagehound.sinks import SqliteLogSink
from pagehound.utils.logging import CrawlerLogger, setup_logging
from pagehound.utils.url_utils import get_host, parse_http_url

console = Console(stderr=True)

DEFAULT_MATCHES = ("error", "warning")
QUICK_SCAN_CONTENT_TYPES = ("text/html", "text/html; charset=utf-8", "text/html; charset=UTF-8")


class CrawlCommand(click.Command):
    """Click command that reports usage errors with exit status 1."""

    def main(self, args=None, prog_name=None, complete_var=None, standalone_mode=True, **extra):
        try:
            rv = super().main(
                args,
                prog_name,
                complete_var,
                standalone_mode=False,
                **extra,
            )
        except click.ClickException as e:
            e.show()
            sys.exit(1)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(1)
        sys.exit(rv or 0)


def build_quick_scan(
    url: str,
    log_file: str,
    delay: float,
    save_cookies: bool,
    lifo: bool,
    matches: tuple[str, ...],
    http_opts: dict,
) -> Engine:
    """
    Assemble the built-in scan setup.

    A same-domain link appender plus case-insensitive string matches on
    200 HTML pages, logging to an SQLite file.
    """
    engine = Engine(
        EngineConfig(delay=delay, save_cookies=save_cookies, lifo=lifo, http_opts=http_opts)
    )
    engine.set_log_sink(SqliteLogSink(log_file))
    engine.add_handler(LinkAppender(name="LinkAppender", domain=get_host(url)))

    for needle in matches:
        engine.add_handler(
            StringMatch(
                name=f"StringMatch:{needle}",
                match=needle,
                match_case=False,
                status=200,
                content_type=list(QUICK_SCAN_CONTENT_TYPES),
            )
        )
    return engine


async def _run_engine(engine: Engine, url: str, logger: CrawlerLogger) -> int:
    """Run the crawl with SIGINT/SIGTERM mapped to a cooperative stop."""
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, engine.stop)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handler unavailable", signal=sig.name)

    try:
        async with engine:
            return await engine.run(url)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


@click.command(cls=CrawlCommand)
@click.argument("url")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Crawl configuration file (YAML or INI).",
)
@click.option(
    "--format",
    "config_format",
    type=click.Choice(["yaml", "ini"], case_sensitive=False),
    default=None,
    help="Configuration file format (default: from file extension).",
)
@click.option(
    "--section",
    "-s",
    type=str,
    default="default",
    help="Configuration section to use (default: default).",
)
@click.option(
    "--delay",
    "-d",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds to wait between requests.",
)
@click.option(
    "--log",
    "-l",
    "log_file",
    type=click.Path(dir_okay=False),
    default="pagehound.sq3",
    help="SQLite log file for the quick scan (default: pagehound.sq3).",
)
@click.option(
    "--savecookies",
    is_flag=True,
    default=False,
    help="Save and resend cookies throughout the session.",
)
@click.option(
    "--lifo/--fifo",
    default=None,
    help="Frontier order (quick scan default: lifo).",
)
@click.option(
    "--match",
    "-m",
    multiple=True,
    help="String to look for in pages (repeatable; default: error, warning).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
@click.version_option(__version__, prog_name="pagehound")
def main(
    url: str,
    config_path: str | None,
    config_format: str | None,
    section: str,
    delay: float | None,
    log_file: str,
    savecookies: bool,
    lifo: bool | None,
    match: tuple[str, ...],
    verbose: bool,
) -> int:
    """
    pagehound - pluggable web crawler.

    Crawls from URL, passing every fetched document through a chain of
    handlers and recording the results in a crawl log.

    Example:
        pagehound -d 1 https://example.com
    """
    settings = load_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, format_type=settings.log_format)
    logger = CrawlerLogger("cli")

    try:
        parse_http_url(url)

        if config_path:
            crawl_file = load_crawl_file(config_path, config_format, section)
            if delay is not None:
                crawl_file.engine.delay = delay
            if lifo is not None:
                crawl_file.engine.lifo = lifo
            if savecookies:
                crawl_file.engine.savecookies = True
            engine = build_engine(crawl_file, settings=settings)
        else:
            engine = build_quick_scan(
                url,
                log_file=log_file,
                delay=delay or 0.0,
                save_cookies=savecookies,
                lifo=True if lifo is None else lifo,
                matches=match or DEFAULT_MATCHES,
                http_opts=settings.http_defaults(),
            )
    except CrawlerError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(e.message)}", soft_wrap=True)
        click.echo("Performed a total of 0 HTTP requests.")
        return 1

    try:
        asyncio.run(_run_engine(engine, url, logger))
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}", soft_wrap=True)
        if verbose:
            traceback.print_exc()
        return 1
    finally:
        click.echo(f"Performed a total of {engine.request_counter} HTTP requests.")

    return 0


if __name__ == "__main__":
    main()
