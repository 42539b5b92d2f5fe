# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""HTTP transport for the Airbrake v3 notices API."""

import json
import logging
from typing import IO, Any

import httpx

from .exceptions import RequestFailedError, ResponseDecodeError, UnexpectedStatusError
from .models import Notice, NoticeResult
from .notice import encode_notice

logger = logging.getLogger(__name__)

NOTICE_PATH = "/api/v3/projects/{project_id}/notices?key={api_key}"


def build_notice_url(service_url: str, project_id: str, api_key: str) -> str:
    """Build the notices endpoint URL for a project."""
    return service_url.rstrip("/") + NOTICE_PATH.format(project_id=project_id, api_key=api_key)


def _decode_result(body: bytes) -> NoticeResult:
    try:
        payload = json.loads(body)
        # the API sends the numeric id as a JSON string
        return NoticeResult(id=int(payload["id"]), url=str(payload["url"]))
    except (ValueError, KeyError, TypeError) as e:
        raise ResponseDecodeError(f"error decoding response json: {e}") from e


class NoticeTransport:
    """Sends notices to the notices API, one POST per notice.

    There is no retry. Every failure is raised as a ``TransportError``
    subclass for the caller to log.

    Attributes:
        notice_url: Endpoint URL, fixed for the lifetime of the transport
        timeout: Request timeout in seconds, or None for the httpx default
    """

    def __init__(
        self,
        notice_url: str,
        debug_log_out: IO[bytes] | None = None,
        debug_log_in: IO[bytes] | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        """Initialize the transport.

        Args:
            notice_url: Endpoint URL including project id and api key
            debug_log_out: Writer mirroring outgoing request bodies
            debug_log_in: Writer mirroring incoming success bodies
            timeout: Optional request timeout in seconds
            client: Optional httpx client; module-level ``httpx.post`` is
                used when omitted
        """
        self.notice_url = notice_url
        self.debug_log_out = debug_log_out
        self.debug_log_in = debug_log_in
        self.timeout = timeout
        self._client = client

    def _post(self, body: bytes) -> httpx.Response:
        kwargs: dict[str, Any] = {
            "content": body,
            "headers": {"Content-Type": "application/json"},
        }
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self._client is not None:
            return self._client.post(self.notice_url, **kwargs)
        return httpx.post(self.notice_url, **kwargs)

    def send(self, notice: Notice) -> NoticeResult:
        """Send a notice and return the API's result.

        Args:
            notice: Notice to deliver

        Returns:
            NoticeResult with the report id and canonical URL

        Raises:
            NoticeEncodingError: If the notice cannot be serialized
            RequestFailedError: If the request could not be made
            UnexpectedStatusError: If the status is not 201 Created
            ResponseDecodeError: If a 201 body cannot be decoded
        """
        body = encode_notice(notice)
        if self.debug_log_out is not None:
            self.debug_log_out.write(body)

        logger.debug("Posting notice (%d bytes)", len(body))
        try:
            response = self._post(body)
        except httpx.HTTPError as e:
            raise RequestFailedError(f"error making request to airbrake service: {e}", cause=e) from e

        if response.status_code != httpx.codes.CREATED:
            status_line = f"{response.status_code} {response.reason_phrase}".strip()
            logger.debug("Notice rejected with status %s", status_line)
            raise UnexpectedStatusError(response.status_code, status_line)

        content = response.content
        if self.debug_log_in is not None:
            self.debug_log_in.write(content)
        result = _decode_result(content)
        logger.debug("Notice accepted with id %d", result.id)
        return result
