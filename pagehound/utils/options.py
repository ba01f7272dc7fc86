"""
Option parsing helpers for configurable components.

Handlers and log sinks are configured from plain mappings that may come
from Python code, YAML or INI files. Keys are matched case-insensitively
and values are coerced with pydantic so that INI strings such as "true" or
"200" are accepted.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pagehound.exceptions import ConfigurationError

_BOOL = TypeAdapter(bool)
_INT = TypeAdapter(int)
_FLOAT = TypeAdapter(float)


def normalize_options(
    options: Mapping[str, Any] | None,
    allowed: Iterable[str],
    owner: str,
) -> dict[str, Any]:
    """
    Lower-case option keys and reject unknown ones.

    Args:
        options: Raw option mapping.
        allowed: Recognized (lower-case) option names.
        owner: Component name used in error messages.

    Returns:
        The options keyed by lower-case name.

    Raises:
        ConfigurationError: If an option is not recognized.
    """
    allowed = set(allowed)
    normalized: dict[str, Any] = {}
    for key, value in (options or {}).items():
        name = str(key).lower()
        if name not in allowed:
            raise ConfigurationError(f"Unknown option '{key}' for {owner}", option=str(key))
        normalized[name] = value
    return normalized


def as_bool(value: Any, option: str) -> bool:
    """Coerce an option value to bool ("true", "yes", "1", "on", ...)."""
    try:
        return _BOOL.validate_python(value)
    except ValidationError as e:
        raise ConfigurationError(f"Option '{option}' must be a boolean", option=option) from e


def as_int(value: Any, option: str) -> int:
    """Coerce an option value to int."""
    try:
        return _INT.validate_python(value)
    except ValidationError as e:
        raise ConfigurationError(f"Option '{option}' must be an integer", option=option) from e


def as_float(value: Any, option: str) -> float:
    """Coerce an option value to float."""
    try:
        return _FLOAT.validate_python(value)
    except ValidationError as e:
        raise ConfigurationError(f"Option '{option}' must be a number", option=option) from e


def as_list(value: Any) -> list[Any]:
    """
    Turn a scalar, a sequence or a comma-separated string into a list.

    None gives an empty list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]
