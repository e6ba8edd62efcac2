"""Shared fixtures: temporary store, fake Resend provider, proxy app."""

from __future__ import annotations

import json
from typing import Callable, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from htmlemailer.core.database import init_database
from htmlemailer.core.models import AppConfig, LimitsConfig, ProviderConfig, SafetyConfig
from htmlemailer.db.repository import Repository
from htmlemailer.web.app import create_app

SAFE_HTML = "<!DOCTYPE html><html><head><title>Welcome</title></head><body><p>Hello</p></body></html>"


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "emailer.db")
    init_database(path)
    return path


@pytest.fixture
def repo(db_path) -> Repository:
    return Repository(db_path)


class FakeProvider:
    """Stands in for the Resend API behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: Optional[dict] = {"id": "msg_123"}
        self.raise_error: Optional[Exception] = None
        self.raw: Optional[httpx.Response] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.raw is not None:
            return self.raw
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_client(provider) -> Callable[..., TestClient]:
    """Build a TestClient for the proxy, optionally with custom limits/safety."""

    def _make(strict: bool = False, max_request_bytes: int = 1024 * 1024) -> TestClient:
        cfg = AppConfig(
            provider=ProviderConfig(base_url="https://api.resend.test"),
            limits=LimitsConfig(max_request_bytes=max_request_bytes),
            safety=SafetyConfig(strict_proxy=strict),
        )
        return TestClient(create_app(config=cfg, transport=provider.transport))

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
