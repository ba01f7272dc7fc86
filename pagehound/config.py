"""
Configuration management for pagehound.

Two layers:

- CrawlerSettings: process-wide settings loaded from PAGEHOUND_* environment
  variables (identity, timeouts, logging).
- Crawl files: YAML or INI documents describing one crawl setup (engine
  options, log sink and handler chain), split into named sections.
"""

import configparser
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagehound import __version__
from pagehound.core.engine import Engine, EngineConfig
from pagehound.core.transport import Transport
from pagehound.exceptions import ConfigurationError
from pagehound.handlers.registry import create_handler
from pagehound.sinks.factory import create_log_sink
from pagehound.utils.logging import CrawlerLogger


class CrawlerSettings(BaseSettings):
    """Main settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PAGEHOUND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Identity
    user_agent: str = f"pagehound/{__version__}"

    # HTTP
    request_timeout_seconds: float = 30.0
    verify_ssl: bool = True

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    def http_defaults(self) -> dict[str, Any]:
        """HTTP options implied by the environment."""
        return {
            "useragent": self.user_agent,
            "timeout": self.request_timeout_seconds,
            "verify": self.verify_ssl,
        }


def load_settings() -> CrawlerSettings:
    """Load settings from environment variables."""
    return CrawlerSettings()


# =============================================================================
# Crawl File Models
# =============================================================================


class EngineSection(BaseModel):
    """The "engine" part of a crawl file."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    delay: float = Field(default=0.0, ge=0)
    savecookies: bool = True
    lifo: bool = False
    http_opts: dict[str, Any] = Field(default_factory=dict, alias="httpOpts")

    def to_engine_config(self, http_defaults: dict[str, Any] | None = None) -> EngineConfig:
        """Convert to an EngineConfig, layering file HTTP options over defaults."""
        return EngineConfig(
            delay=self.delay,
            save_cookies=self.savecookies,
            lifo=self.lifo,
            http_opts={**(http_defaults or {}), **self.http_opts},
        )


class LoggerSection(BaseModel):
    """The "logger" part of a crawl file."""

    model_config = ConfigDict(extra="forbid")

    type: str = "xml"
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("options", mode="before")
    @classmethod
    def _empty_options(cls, value: Any) -> Any:
        return {} if value is None else value


class HandlerSection(BaseModel):
    """One entry of the "handlers" part of a crawl file."""

    model_config = ConfigDict(extra="forbid")

    type: str
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("options", mode="before")
    @classmethod
    def _empty_options(cls, value: Any) -> Any:
        return {} if value is None else value


class CrawlFile(BaseModel):
    """A validated crawl file section. Handlers keep their file order."""

    engine: EngineSection = Field(default_factory=EngineSection)
    logger: LoggerSection | None = None
    handlers: dict[str, HandlerSection] = Field(default_factory=dict)

    @field_validator("engine", "handlers", mode="before")
    @classmethod
    def _empty_section(cls, value: Any) -> Any:
        return {} if value is None else value


# =============================================================================
# Loading
# =============================================================================

FORMATS = {
    ".yml": "yaml",
    ".yaml": "yaml",
    ".ini": "ini",
    ".cfg": "ini",
}


def _read_yaml(path: Path, section: str) -> Any:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in '{path}': {e}") from e

    if not isinstance(data, dict) or section not in data:
        raise ConfigurationError(f"Section '{section}' not found in '{path}'", option="section")
    return data[section]


def _nest(items: dict[str, str]) -> dict[str, Any]:
    """Expand dotted INI keys ("handlers.links.type") into nested dicts."""
    nested: dict[str, Any] = {}
    for key, value in items.items():
        node = nested
        *parents, leaf = key.split(".")
        for part in parents:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ConfigurationError(f"Conflicting INI key '{key}'", option=key)
            node = child
        node[leaf] = value
    return nested


def _read_ini(path: Path, section: str) -> Any:
    parser = configparser.ConfigParser(interpolation=None, default_section="__none__")
    parser.optionxform = str  # keep key case (e.g. httpOpts, captureValue)
    try:
        parser.read_string(path.read_text(encoding="utf-8"), source=str(path))
    except configparser.Error as e:
        raise ConfigurationError(f"Invalid INI in '{path}': {e}") from e

    # Sections may extend another one: [child : parent]
    sections: dict[str, tuple[str | None, dict[str, str]]] = {}
    for raw_name in parser.sections():
        name, _, parent = raw_name.partition(":")
        sections[name.strip()] = (parent.strip() or None, dict(parser.items(raw_name)))

    def collect(name: str, seen: tuple[str, ...] = ()) -> dict[str, str]:
        if name not in sections:
            raise ConfigurationError(f"Section '{name}' not found in '{path}'", option="section")
        if name in seen:
            raise ConfigurationError(f"Circular section inheritance at '{name}'", option="section")
        parent, items = sections[name]
        inherited = collect(parent, seen + (name,)) if parent else {}
        return {**inherited, **items}

    return _nest(collect(section))


def load_crawl_file(
    path: str | Path,
    fmt: str | None = None,
    section: str = "default",
) -> CrawlFile:
    """
    Load and validate one section of a crawl file.

    Args:
        path: Path of the YAML or INI file.
        fmt: "yaml" or "ini"; guessed from the file extension when omitted.
        section: Name of the section to use.

    Returns:
        The validated crawl file section.

    Raises:
        ConfigurationError: If the file cannot be read, the format is
            unknown, the section is missing or validation fails.
    """
    path = Path(path)
    fmt = (fmt or FORMATS.get(path.suffix.lower(), "")).lower()
    if fmt == "yml":
        fmt = "yaml"
    if fmt not in ("yaml", "ini"):
        raise ConfigurationError(
            f"Unable to determine configuration format of '{path}'", option="format"
        )

    if not path.is_file():
        raise ConfigurationError(f"Configuration file '{path}' does not exist")

    raw = _read_yaml(path, section) if fmt == "yaml" else _read_ini(path, section)
    if raw is None:
        raw = {}

    try:
        return CrawlFile.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid crawl file section '{section}': {e}") from e


def build_engine(
    crawl_file: CrawlFile,
    transport: Transport | None = None,
    settings: CrawlerSettings | None = None,
    logger: CrawlerLogger | None = None,
) -> Engine:
    """
    Assemble an engine, its log sink and its handler chain from a crawl file.

    Args:
        crawl_file: Validated crawl file section.
        transport: Transport override (tests inject mocks here).
        settings: Environment settings supplying HTTP defaults.
        logger: Logger instance.

    Returns:
        The configured engine. No log sink is set when the file has no
        "logger" part, so the engine falls back to XML on stdout.

    Raises:
        ConfigurationError: If a handler or sink cannot be built.
    """
    logger = logger or CrawlerLogger("config")
    http_defaults = settings.http_defaults() if settings else None
    engine = Engine(
        crawl_file.engine.to_engine_config(http_defaults),
        transport=transport,
    )

    if crawl_file.logger is not None:
        engine.set_log_sink(create_log_sink(crawl_file.logger.type, crawl_file.logger.options))

    for name, section in crawl_file.handlers.items():
        engine.add_handler(create_handler(section.type, name, section.options))

    logger.info(
        "Engine configured",
        handlers=[h.name for h in engine.handlers],
        log_sink=type(engine.log_sink).__name__ if engine.log_sink else None,
    )
    return engine
