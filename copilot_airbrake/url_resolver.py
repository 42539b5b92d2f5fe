# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Report URL resolution.

A resolver turns a ``NoticeResult`` into the URL shown to a person.
Resolution never raises: whenever shortening fails the canonical report
URL is returned.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable

from .config import URL_SERVICE_AIRBAT, URL_SERVICE_NONE
from .models import NoticeResult
from .shorteners import Shortener, airbat_url, get_shortener

logger = logging.getLogger(__name__)


class URLResolver(ABC):
    """Abstract base class for report URL resolvers."""

    def resolve(self, result: NoticeResult) -> str:
        """Return the URL to present for a notice result.

        Args:
            result: Successful notice result

        Returns:
            Short URL, or the canonical URL when shortening fails
        """
        try:
            url = self._shorten(result)
        except Exception as e:
            logger.warning("URL shortening failed, using canonical url: %s", e)
            return result.url
        if not url:
            logger.warning("URL shortening returned an empty url, using canonical url")
            return result.url
        return url

    @abstractmethod
    def _shorten(self, result: NoticeResult) -> str:
        pass


class CanonicalURLResolver(URLResolver):
    """Uses the report URL returned by the API verbatim."""

    def _shorten(self, result: NoticeResult) -> str:
        return result.url


class EncodedURLResolver(URLResolver):
    """Computes a short URL locally from the numeric report id."""

    def __init__(self, encoder: Callable[[int], str] = airbat_url):
        self.encoder = encoder

    def _shorten(self, result: NoticeResult) -> str:
        return self.encoder(result.id)


class ShortenedURLResolver(URLResolver):
    """Shortens the canonical URL with an external service."""

    def __init__(self, shortener: Shortener, service: str = ""):
        self.shortener = shortener
        self.service = service

    def _shorten(self, result: NoticeResult) -> str:
        logger.debug("Shortening %s via %s", result.url, self.service or type(self.shortener).__name__)
        return self.shortener.shorten(result.url)


def create_url_resolver(url_service: str = URL_SERVICE_NONE) -> URLResolver:
    """Create the resolver selected by ``BrakeConfig.url_service``.

    Args:
        url_service: "" for no shortening, "airbat" for the local encoder,
            or the name of a registered external shortener

    Returns:
        URLResolver instance

    Raises:
        ValueError: If url_service names no known service
    """
    if url_service == URL_SERVICE_NONE:
        return CanonicalURLResolver()
    if url_service == URL_SERVICE_AIRBAT:
        return EncodedURLResolver()
    return ShortenedURLResolver(get_shortener(url_service), service=url_service)
