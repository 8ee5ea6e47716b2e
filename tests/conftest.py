"""Shared fixtures: fake device endpoints served through httpx.MockTransport."""

from __future__ import annotations

import os
from collections import Counter

# Keep test runs from writing a rotating log file into the checkout
os.environ.setdefault("WEIGHLINE_LOG_FILE", "")
os.environ.setdefault("WEIGHLINE_MODE", "sim")

import httpx
import pytest


class FakeDevices:
    """Scriptable device farm: maps URL -> body text, status code or exception."""

    def __init__(self) -> None:
        self.bodies: dict[str, str] = {}
        self.status: dict[str, int] = {}
        self.failures: dict[str, Exception] = {}
        self.calls: Counter[str] = Counter()

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls[url] += 1
        if url in self.failures:
            raise self.failures[url]
        return httpx.Response(self.status.get(url, 200), text=self.bodies.get(url, ""))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def devices() -> FakeDevices:
    return FakeDevices()
