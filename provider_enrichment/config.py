"""Environment-driven settings for the enrichment tools."""

import os
from dataclasses import dataclass

from .errors import ConfigError

API_KEY_ENV = "MAPS_SERVER_API_KEY"
TIMEOUT_ENV = "PLACES_HTTP_TIMEOUT_SECONDS"
DELAY_ENV = "PLACES_REQUEST_DELAY_SECONDS"
MAX_RESULTS_ENV = "PLACES_MAX_RESULTS"

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_DELAY_SECONDS = 0.2
DEFAULT_MAX_RESULTS = 5


@dataclass(frozen=True)
class EnrichSettings:
    api_key: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    max_results: int = DEFAULT_MAX_RESULTS


def _required_env(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        raise ConfigError(f"missing required environment variable: {name}")
    return value


def _parse_float(name: str, default: float, minimum: float, inclusive: bool) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < minimum or (not inclusive and value == minimum):
        op = ">=" if inclusive else ">"
        raise ConfigError(f"{name} must be {op} {minimum:g}")
    return value


def _parse_positive_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be > 0")
    return value


def load_settings() -> EnrichSettings:
    """Read enrichment settings from the environment.

    The API key is checked first so a missing credential is reported before
    anything else is validated.
    """
    api_key = _required_env(API_KEY_ENV)
    return EnrichSettings(
        api_key=api_key,
        timeout_seconds=_parse_float(TIMEOUT_ENV, DEFAULT_TIMEOUT_SECONDS, 0.0, inclusive=False),
        delay_seconds=_parse_float(DELAY_ENV, DEFAULT_DELAY_SECONDS, 0.0, inclusive=True),
        max_results=_parse_positive_int(MAX_RESULTS_ENV, DEFAULT_MAX_RESULTS),
    )
