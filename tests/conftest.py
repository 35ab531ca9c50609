"""Shared test fixtures for textra.

Provides a fake TexTra service (both endpoints behind one
:class:`httpx.MockTransport`), a controllable clock, ready-made clients,
isolated config directories, and output state management. These fixtures
are discovered by pytest automatically.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional
from urllib.parse import parse_qsl

import httpx
import pytest

from textra.auth.token_store import TokenStore
from textra.models import ClientSettings, Credentials
from textra.output import OutputFormat, OutputManager, reset_output, set_output


BASE_URL = "https://textra.test"
TOKEN_URL = f"{BASE_URL}/oauth2/token.php"
API_URL = f"{BASE_URL}/api/"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a quiet manager for the test and reset it afterwards.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; resetting forces a fresh manager on next use.
    """
    set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake service
# ---------------------------------------------------------------------------


class FakeClock:
    """A manually advanced clock usable wherever ``time.monotonic`` is."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTexTra:
    """In-memory stand-in for the token and API endpoints.

    Every request's form body is decoded and recorded in ``token_calls`` or
    ``api_calls``. Replies are rebuilt per request from the ``token_*`` and
    ``api_*`` attributes, which tests overwrite to script the service.
    """

    def __init__(self) -> None:
        self.token_calls: list[dict[str, str]] = []
        self.api_calls: list[dict[str, str]] = []
        self.token_json: Any = {"access_token": "T", "expires_in": 3600}
        self.token_content: Optional[bytes] = None
        self.token_status = 200
        self.token_error: Optional[Exception] = None
        self.api_json: Any = {"resultset": {"code": 0, "message": "ok", "result": {"text": "hi"}}}
        self.api_content: Optional[bytes] = None
        self.api_status = 200
        self.api_error: Optional[Exception] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        form = dict(parse_qsl(request.content.decode(), keep_blank_values=True))
        if request.url.path == "/oauth2/token.php":
            self.token_calls.append(form)
            if self.token_error is not None:
                raise self.token_error
            return self._reply(self.token_status, self.token_content, self.token_json)
        if request.url.path == "/api/":
            self.api_calls.append(form)
            if self.api_error is not None:
                raise self.api_error
            return self._reply(self.api_status, self.api_content, self.api_json)
        return httpx.Response(404, text="not found")

    @staticmethod
    def _reply(status: int, content: Optional[bytes], payload: Any) -> httpx.Response:
        if content is not None:
            return httpx.Response(status, content=content)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def set_token(self, access_token: str, expires_in: int = 3600) -> None:
        self.token_json = {"access_token": access_token, "expires_in": expires_in}

    def set_envelope(self, **envelope: Any) -> None:
        self.api_json = {"resultset": envelope}


@pytest.fixture
def fake_service() -> FakeTexTra:
    return FakeTexTra()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(name="alice", key="key-123", secret="secret-456")


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(base_url=BASE_URL)


@pytest.fixture
def token_store(clock: FakeClock) -> TokenStore:
    return TokenStore(clock=clock)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME into tmp_path, forces the XDG
    code path, clears all TEXTRA_* environment variables, and changes the
    working directory to tmp_path.
    """
    monkeypatch.setattr("textra.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["TEXTRA_NAME", "TEXTRA_KEY", "TEXTRA_SECRET", "TEXTRA_BASE_URL"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
