"""Environment-driven parser settings."""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CACHE_TTL_ENV = "REPORT_PARSER_CACHE_TTL"
CACHE_SIZE_ENV = "REPORT_PARSER_CACHE_SIZE"
MAX_CHARS_ENV = "REPORT_PARSER_MAX_CHARS"

DEFAULT_CACHE_TTL_SECONDS = 300
DEFAULT_CACHE_MAX_ENTRIES = 50
DEFAULT_MAX_INPUT_CHARS = 1_000_000


@dataclass(frozen=True)
class ParserSettings:
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    cache_max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    max_input_chars: int = DEFAULT_MAX_INPUT_CHARS


def _env_int(environ: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    env_value = environ.get(name)
    if env_value:
        try:
            value = int(env_value)
        except ValueError:
            logger.debug("Invalid %s value: %s", name, env_value)
            return default
        if value < minimum:
            logger.debug("Out of range %s value: %s", name, env_value)
            return default
        return value
    return default


def load_settings(environ: Mapping[str, str] | None = None) -> ParserSettings:
    env = os.environ if environ is None else environ
    return ParserSettings(
        cache_ttl_seconds=_env_int(env, CACHE_TTL_ENV, DEFAULT_CACHE_TTL_SECONDS),
        cache_max_entries=_env_int(env, CACHE_SIZE_ENV, DEFAULT_CACHE_MAX_ENTRIES),
        max_input_chars=_env_int(env, MAX_CHARS_ENV, DEFAULT_MAX_INPUT_CHARS, minimum=1),
    )


def resolve_max_chars(value: int | None, environ: Mapping[str, str] | None = None) -> int:
    if value is not None:
        return max(value, 0)
    return load_settings(environ).max_input_chars
