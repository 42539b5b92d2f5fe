# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Test fixtures for the copilot_airbrake package."""

from __future__ import annotations

import io
import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest

from copilot_airbrake import Brake, BrakeConfig

SUCCESS_BODY = b'{"id":"42","url":"http://x/42"}'


@dataclass
class RecordingAPI:
    """Stub notices API that records every request it receives."""

    status_code: int = 201
    body: bytes = SUCCESS_BODY
    error: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.body)

    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def last_payload(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def api() -> RecordingAPI:
    """Stub notices API answering 201 with id 42."""
    return RecordingAPI()


@pytest.fixture
def http_client(api: RecordingAPI) -> httpx.Client:
    """httpx client routed to the stub API."""
    client = httpx.Client(transport=httpx.MockTransport(api.handler))
    yield client
    client.close()


@pytest.fixture
def log_writer() -> io.StringIO:
    """Human log sink."""
    return io.StringIO()


@pytest.fixture
def config(log_writer: io.StringIO) -> BrakeConfig:
    """Config that logs to the log_writer fixture only."""
    return BrakeConfig(
        app_version="1.2.0",
        app_url="https://app.example.com",
        log_writer=log_writer,
        log_stdout_silent=True,
    )


@pytest.fixture
def brake(config: BrakeConfig, http_client: httpx.Client) -> Brake:
    """Brake wired to the stub API."""
    return Brake("12345", "secret-key", "testing", config=config, http_client=http_client)
