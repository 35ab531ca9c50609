"""Tests for AsyncTexTraClient."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from textra.client import AsyncTexTraClient
from textra.exceptions import AuthError, RequestError


def _run(coro):
    return asyncio.run(coro)


@pytest.fixture
def make_client(credentials, settings, token_store, fake_service):
    def _make() -> AsyncTexTraClient:
        return AsyncTexTraClient(
            credentials, settings, token_store=token_store, transport=fake_service.transport
        )

    return _make


class TestAsyncOperations:
    def test_translate(self, make_client, fake_service) -> None:
        async def go():
            async with make_client() as client:
                return await client.translate("hello", "mt", "generalNT_en_ja")

        envelope = _run(go())
        assert envelope.model_dump(exclude_none=True) == {
            "code": 0,
            "message": "ok",
            "result": {"text": "hi"},
        }
        assert fake_service.api_calls[0]["api_param"] == "generalNT_en_ja"

    def test_all_operations_share_one_token(self, make_client, fake_service) -> None:
        async def go():
            async with make_client() as client:
                await client.detect_language("Bonjour")
                await client.split("One. Two.", "en", join=True)
                await client.list_acquisition("mt")

        _run(go())
        assert len(fake_service.token_calls) == 1
        detect, split, listing = fake_service.api_calls
        assert "api_param" not in detect
        assert split["join"] == "1"
        assert listing["api_param"] == "get"

    def test_refresh_after_expiry(self, make_client, fake_service, clock) -> None:
        fake_service.set_token("first", expires_in=10)

        async def go():
            async with make_client() as client:
                await client.detect_language("a")
                clock.advance(10)
                fake_service.set_token("second", expires_in=10)
                await client.detect_language("b")

        _run(go())
        assert [c["access_token"] for c in fake_service.api_calls] == ["first", "second"]

    def test_concurrent_calls_single_refresh(self, make_client, fake_service) -> None:
        async def go():
            async with make_client() as client:
                return await asyncio.gather(
                    *(client.detect_language(f"text {i}") for i in range(10))
                )

        envelopes = _run(go())
        assert len(envelopes) == 10
        assert len(fake_service.token_calls) == 1
        assert len(fake_service.api_calls) == 10

    def test_protocol_error_returned(self, make_client, fake_service) -> None:
        fake_service.set_envelope(code=533, message="Over quota")

        async def go():
            async with make_client() as client:
                return await client.translate("hello", "mt", "generalNT_en_ja")

        assert _run(go()).code == 533


class TestAsyncFailures:
    def test_auth_failure(self, make_client, fake_service) -> None:
        fake_service.token_json = {"access_token": "T"}

        async def go():
            async with make_client() as client:
                await client.translate("hello", "mt", "generalNT_en_ja")

        with pytest.raises(AuthError, match="expires_in"):
            _run(go())
        assert fake_service.api_calls == []

    def test_request_failure(self, make_client, fake_service) -> None:
        fake_service.api_error = httpx.ConnectError("unreachable")

        async def go():
            async with make_client() as client:
                await client.detect_language("x")

        with pytest.raises(RequestError, match="unreachable"):
            _run(go())

    def test_timeout_via_wait_for(self, credentials, settings, token_store) -> None:
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json={"access_token": "T", "expires_in": 60})

        async def go():
            client = AsyncTexTraClient(
                credentials, settings, token_store=token_store,
                transport=httpx.MockTransport(slow),
            )
            async with client:
                await asyncio.wait_for(client.detect_language("x"), timeout=0.05)

        with pytest.raises(asyncio.TimeoutError):
            _run(go())
