"""Asynchronous TexTra client -- mirrors :class:`~textra.client.sync_client.TexTraClient`.

This module provides :class:`AsyncTexTraClient`, the non-blocking
counterpart to :class:`~textra.client.sync_client.TexTraClient`. It wraps
:class:`httpx.AsyncClient` and offers the same token lifecycle, dispatch
path, and named operations, but every network call is awaited.

The only suspension points are the two network calls: the token exchange
and the operation POST. The token check and any refresh it triggers finish
before the operation is sent. Concurrent coroutines on one instance that
find the token invalid wait on a single in-flight refresh rather than each
exchanging credentials.

No timeout is applied unless :attr:`~textra.models.ClientSettings.timeout`
is set; callers can also bound a call with :func:`asyncio.wait_for`.

See Also:
    :class:`~textra.client.sync_client.TexTraClient` for the blocking
    equivalent.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Mapping, Optional, Union

import httpx

from textra.auth.authenticator import Authenticator
from textra.auth.token_store import TokenStore
from textra.client.request import build_form, decode_envelope
from textra.exceptions import RequestError
from textra.models import (
    ClientSettings,
    Credentials,
    ListOptions,
    OperationRequest,
    ResponseEnvelope,
    Token,
    TranslateOptions,
)
from textra.operations import (
    detect_language_request,
    list_request,
    split_request,
    translate_request,
)
from textra.output import get_output


class AsyncTexTraClient:
    """Asynchronous client for the TexTra API.

    Takes the same arguments as
    :class:`~textra.client.sync_client.TexTraClient` (with an async
    transport) and must be used as an async context manager.

    Example::

        async with AsyncTexTraClient(creds) as client:
            envelope = await client.translate("Hello", "mt", "generalNT_en_ja")
    """

    def __init__(
        self,
        credentials: Credentials,
        settings: Optional[ClientSettings] = None,
        *,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credentials = credentials
        self._settings = settings or ClientSettings()
        self._store = token_store or TokenStore(
            clock=time.monotonic, leeway=self._settings.token_leeway
        )
        self._authenticator = Authenticator(
            credentials, self._settings.token_url, clock=self._store.now
        )
        self._transport = transport
        self._refresh_lock = asyncio.Lock()
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncTexTraClient:
        self._client = httpx.AsyncClient(
            timeout=self._settings.timeout,
            verify=self._settings.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def token_store(self) -> TokenStore:
        return self._store

    # ------------------------------------------------------------------ #
    # Core
    # ------------------------------------------------------------------ #

    async def authenticate(self, force: bool = False) -> Token:
        """Return a valid token, exchanging credentials only when needed.

        Raises:
            AuthError: If the token exchange fails.
        """
        if force:
            self._store.clear()
        return await self._ensure_token(self._require_client())

    async def dispatch(self, request: OperationRequest) -> ResponseEnvelope:
        """Send one operation and return the decoded envelope.

        Behaves identically to
        :meth:`~textra.client.sync_client.TexTraClient.dispatch` but is
        non-blocking.

        Raises:
            AuthError: If a required token exchange fails.
            RequestError: If the API request fails in transport or its body
                cannot be decoded.
        """
        http = self._require_client()
        token = await self._ensure_token(http)
        output = get_output()

        form = build_form(request, self._credentials, token.value)
        output.debug(
            f"POST {self._settings.api_url} api_name={request.operation_name}"
            + (f" api_param={request.operation_param}" if request.operation_param else "")
        )
        try:
            response = await http.post(
                self._settings.api_url,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise RequestError(f"API request failed: {exc}") from exc

        envelope = decode_envelope(response)
        output.debug(f"Envelope code={envelope.code} message={envelope.message!r}")
        return envelope

    # ------------------------------------------------------------------ #
    # Named operations
    # ------------------------------------------------------------------ #

    async def translate(
        self,
        text: str,
        api_name: str,
        api_param: Optional[str],
        options: Union[TranslateOptions, Mapping[str, Any], None] = None,
    ) -> ResponseEnvelope:
        """Translate *text* with the engine named by *api_name* / *api_param*."""
        return await self.dispatch(translate_request(text, api_name, api_param, options))

    async def detect_language(self, text: str) -> ResponseEnvelope:
        """Detect the language of *text*."""
        return await self.dispatch(detect_language_request(text))

    async def split(self, text: str, lang: str, join: Union[int, bool] = 0) -> ResponseEnvelope:
        """Split *text* (in language *lang*) into sentences."""
        return await self.dispatch(split_request(text, lang, join))

    async def list_acquisition(
        self,
        api_name: str,
        options: Union[ListOptions, Mapping[str, Any], None] = None,
    ) -> ResponseEnvelope:
        """List the resources behind *api_name*."""
        return await self.dispatch(list_request(api_name, options))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _require_client(self) -> httpx.AsyncClient:
        assert self._client is not None, "Client not initialised -- use as async context manager"
        return self._client

    async def _ensure_token(self, http: httpx.AsyncClient) -> Token:
        """Refresh the stored token if it is invalid, then return it.

        The re-check under the lock means coroutines that queued behind an
        in-flight refresh reuse its result instead of refreshing again.
        """
        token = self._store.current()
        if token is not None:
            return token

        async with self._refresh_lock:
            token = self._store.current()
            if token is None:
                output = get_output()
                output.debug(f"Access token missing or expired; POST {self._authenticator.token_url}")
                token = await self._authenticator.arefresh(http)
                self._store.write(token)
                output.debug(
                    f"Access token obtained, valid for {self._store.seconds_remaining():.0f}s"
                )
            return token
