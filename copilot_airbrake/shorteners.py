# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Short-link backends for report URLs.

Two kinds of backend exist:
- a local encoder that turns a numeric report id into a short URL without
  any network call (``airbat_url``)
- external shortening services, registered by name and created through
  ``get_shortener``
"""

from abc import ABC, abstractmethod
from typing import Callable

import httpx

from .exceptions import URLResolutionError

AIRBAT_BASE_URL = "http://airb.at/"

_BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"


def airbat_url(report_id: int) -> str:
    """Encode a report id as an airb.at short URL.

    Args:
        report_id: Numeric report id returned by the notices API

    Returns:
        Short URL

    Raises:
        URLResolutionError: If the id is not a positive integer
    """
    if isinstance(report_id, bool) or not isinstance(report_id, int) or report_id <= 0:
        raise URLResolutionError(f"cannot encode report id {report_id!r}")

    digits = []
    value = report_id
    while value:
        value, remainder = divmod(value, len(_BASE62_ALPHABET))
        digits.append(_BASE62_ALPHABET[remainder])
    return AIRBAT_BASE_URL + "".join(reversed(digits))


class Shortener(ABC):
    """Abstract base class for external link-shortening services."""

    @abstractmethod
    def shorten(self, url: str) -> str:
        """Shorten a URL.

        Args:
            url: URL to shorten

        Returns:
            Short URL

        Raises:
            URLResolutionError: If the service fails
        """
        pass


class SimpleHTTPShortener(Shortener):
    """Shortener for services that answer a GET with the short URL as plain text."""

    def __init__(self, endpoint: str, url_param: str = "url", timeout: float = 10.0, **params: str):
        """Initialize the shortener.

        Args:
            endpoint: Service endpoint URL
            url_param: Query parameter carrying the URL to shorten
            timeout: Request timeout in seconds
            **params: Extra fixed query parameters
        """
        self.endpoint = endpoint
        self.url_param = url_param
        self.timeout = timeout
        self.params = params

    def shorten(self, url: str) -> str:
        try:
            response = httpx.get(
                self.endpoint,
                params={**self.params, self.url_param: url},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise URLResolutionError(f"shortening via {self.endpoint} failed: {e}") from e

        short_url = response.text.strip()
        if not short_url.startswith(("http://", "https://")):
            raise URLResolutionError(f"unexpected response from {self.endpoint}: {short_url[:100]!r}")
        return short_url


class TinyURLShortener(SimpleHTTPShortener):
    """Shortener backed by tinyurl.com."""

    def __init__(self, timeout: float = 10.0):
        super().__init__("https://tinyurl.com/api-create.php", timeout=timeout)


class IsgdShortener(SimpleHTTPShortener):
    """Shortener backed by is.gd."""

    def __init__(self, timeout: float = 10.0):
        super().__init__("https://is.gd/create.php", timeout=timeout, format="simple")


_SHORTENERS: dict[str, Callable[[], Shortener]] = {
    "tinyurl": TinyURLShortener,
    "isgd": IsgdShortener,
}


def register_shortener(name: str, factory: Callable[[], Shortener]) -> None:
    """Register an external shortening service under a name.

    Args:
        name: Service name used as ``BrakeConfig.url_service``
        factory: Callable returning a Shortener instance

    Raises:
        ValueError: If the name is empty or reserved
    """
    if not name or name == "airbat":
        raise ValueError(f"Invalid shortener name: {name!r}")
    _SHORTENERS[name.lower()] = factory


def available_shorteners() -> list[str]:
    return sorted(_SHORTENERS)


def get_shortener(name: str) -> Shortener:
    """Create the shortener registered under a name.

    Raises:
        ValueError: If no shortener is registered under the name
    """
    try:
        factory = _SHORTENERS[name.lower()]
    except KeyError as exc:
        raise ValueError(
            f"Unknown url service: {name}. Available: {', '.join(available_shorteners())}"
        ) from exc
    return factory()
