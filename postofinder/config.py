from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Callable, Mapping, TypeVar

from postofinder.geocoder import DEFAULT_NOMINATIM_URL, DEFAULT_USER_AGENT
from postofinder.overpass import DEFAULT_OVERPASS_URL

ENV_PREFIX = "POSTOFINDER_"

_N = TypeVar("_N", int, float)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Settings:
    overpass_url: str = DEFAULT_OVERPASS_URL
    nominatim_url: str = DEFAULT_NOMINATIM_URL
    user_agent: str = DEFAULT_USER_AGENT
    search_radius_meters: int = 5000
    max_results: int = 20
    overpass_timeout_seconds: float = 30.0
    geocoder_timeout_seconds: float = 5.0
    geocoder_max_retries: int = 1
    geocoder_max_workers: int = 8

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            overpass_url=_text(env, "OVERPASS_URL", defaults.overpass_url),
            nominatim_url=_text(env, "NOMINATIM_URL", defaults.nominatim_url),
            user_agent=_text(env, "USER_AGENT", defaults.user_agent),
            search_radius_meters=_number(env, "SEARCH_RADIUS_METERS", defaults.search_radius_meters, int),
            max_results=_number(env, "MAX_RESULTS", defaults.max_results, int),
            overpass_timeout_seconds=_number(env, "OVERPASS_TIMEOUT", defaults.overpass_timeout_seconds, float),
            geocoder_timeout_seconds=_number(env, "GEOCODER_TIMEOUT", defaults.geocoder_timeout_seconds, float),
            geocoder_max_retries=_number(env, "GEOCODER_MAX_RETRIES", defaults.geocoder_max_retries, int),
            geocoder_max_workers=_number(env, "GEOCODER_MAX_WORKERS", defaults.geocoder_max_workers, int),
        )


def _text(env: Mapping[str, str], name: str, default: str) -> str:
    value = env.get(ENV_PREFIX + name, "").strip()
    return value or default


def _number(env: Mapping[str, str], name: str, default: _N, cast: Callable[[str], _N]) -> _N:
    raw = env.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    return value
