from __future__ import annotations

from collections.abc import Mapping
import json
import logging
import time
from typing import Callable

import requests

from postofinder.models import ADDRESS_UNAVAILABLE, Coordinate
from postofinder.tags import join_address_parts

DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
DEFAULT_USER_AGENT = "PostoFinder/1.0"

logger = logging.getLogger(__name__)


def _first_present(address: Mapping[str, object], *keys: str) -> str | None:
    for key in keys:
        value = address.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def format_nominatim_address(payload: Mapping[str, object]) -> str:
    address = payload.get("address")
    if not isinstance(address, Mapping):
        address = {}

    parts: list[str] = []
    road = _first_present(address, "road")
    if road:
        house_number = _first_present(address, "house_number")
        parts.append(f"{road}, {house_number}" if house_number else road)

    for keys in (("neighbourhood", "suburb"), ("city", "town", "village"), ("state",)):
        value = _first_present(address, *keys)
        if value:
            parts.append(value)

    if parts:
        return join_address_parts(parts)

    display_name = payload.get("display_name")
    if isinstance(display_name, str) and display_name.strip():
        return display_name
    return ADDRESS_UNAVAILABLE


class NominatimReverseGeocoder:
    def __init__(
        self,
        base_url: str = DEFAULT_NOMINATIM_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        max_retries: int = 1,
        retry_delay_seconds: float = 1.0,
        timeout_seconds: float = 5.0,
        session: requests.Session | None = None,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = base_url
        self.user_agent = user_agent
        self.max_retries = max(1, max_retries)
        self.retry_delay_seconds = retry_delay_seconds
        self.timeout_seconds = timeout_seconds
        self.session = session
        self.sleeper = sleeper
        self.last_status = ""
        self.last_error_message = ""

    def resolve_address(self, coordinate: Coordinate, fallback: str = ADDRESS_UNAVAILABLE) -> str:
        """Reverse geocode ``coordinate`` into a formatted address.

        Failures are soft: the ``fallback`` value is returned unchanged. The
        outcome of the most recent call is copied to ``last_status`` /
        ``last_error_message``; concurrent callers should rely on the
        return value only.
        """
        payload, status, message = self._request_json(coordinate)
        if payload is None:
            logger.warning(
                "Reverse geocoding failed for %s,%s: %s %s",
                coordinate.lat,
                coordinate.lon,
                status,
                message,
            )
            result = fallback
        else:
            result = format_nominatim_address(payload)

        self.last_status = status
        self.last_error_message = message
        return result

    def _request_json(self, coordinate: Coordinate) -> tuple[dict[str, object] | None, str, str]:
        params = {
            "format": "json",
            "lat": coordinate.lat,
            "lon": coordinate.lon,
            "zoom": 18,
            "addressdetails": 1,
        }
        headers = {"User-Agent": self.user_agent}
        getter = self.session.get if self.session is not None else requests.get
        status = "UNKNOWN"
        message = ""

        for attempt in range(self.max_retries):
            try:
                response = getter(self.base_url, params=params, headers=headers, timeout=self.timeout_seconds)
                response.raise_for_status()
                payload = response.json()
            except requests.Timeout as error:
                status, message = "TIMEOUT", str(error)
            except requests.HTTPError as error:
                status_code = error.response.status_code if error.response is not None else "?"
                status, message = f"HTTP_{status_code}", str(error)
            except (requests.JSONDecodeError, json.JSONDecodeError) as error:
                status, message = "INVALID_JSON", str(error)
            except requests.RequestException as error:
                status, message = "NETWORK_ERROR", str(error)
            else:
                if isinstance(payload, dict):
                    return payload, "OK", ""
                status, message = "INVALID_JSON", "Expected a JSON object"

            if attempt < self.max_retries - 1:
                self.sleeper(self.retry_delay_seconds)
        return None, status, message
