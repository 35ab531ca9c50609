"""Blocking TexTra client: token lifecycle, dispatch, and named operations.

This module provides :class:`TexTraClient`, which wraps :class:`httpx.Client`
and layers on:

- **Token lifecycle** -- before every dispatch the client asks its
  :class:`~textra.auth.token_store.TokenStore` whether the token is still
  valid, and only when it is not does it run the OAuth2 exchange through
  :class:`~textra.auth.authenticator.Authenticator`.
- **Dispatch** -- every operation is a form POST to the single API endpoint,
  built by :func:`~textra.client.request.build_form` and decoded by
  :func:`~textra.client.request.decode_envelope`.
- **Named operations** -- :meth:`~TexTraClient.translate`,
  :meth:`~TexTraClient.detect_language`, :meth:`~TexTraClient.split`,
  and :meth:`~TexTraClient.list_acquisition` marshal their fields through
  :mod:`textra.operations` and call :meth:`~TexTraClient.dispatch`.

Transport and decode failures raise. A non-zero ``code`` in the envelope
does not: it comes back as data for the caller to branch on.

See Also:
    :class:`~textra.client.async_client.AsyncTexTraClient` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

import threading
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


class TexTraClient:
    """Blocking client for the TexTra API.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed. One instance owns one token; instances with
    different credentials never share state.

    Args:
        credentials: Registered name, key, and secret.
        settings: Base URL and transport settings. Defaults to the public
            service with no timeout.
        token_store: Store to keep the access token in. A fresh store on
            :func:`time.monotonic` is created when omitted.
        transport: Optional :mod:`httpx` transport, e.g. a
            :class:`httpx.MockTransport` in tests.

    Example::

        creds = Credentials(name="alice", key="...", secret="...")
        with TexTraClient(creds) as client:
            envelope = client.translate("Hello", "mt", "generalNT_en_ja")
            if envelope.ok:
                print(envelope.result["text"])
    """

    def __init__(
        self,
        credentials: Credentials,
        settings: Optional[ClientSettings] = None,
        *,
        token_store: Optional[TokenStore] = None,
        transport: Optional[httpx.BaseTransport] = None,
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
        self._refresh_lock = threading.Lock()
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> TexTraClient:
        self._client = httpx.Client(
            timeout=self._settings.timeout,
            verify=self._settings.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
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

    def authenticate(self, force: bool = False) -> Token:
        """Return a valid token, exchanging credentials only when needed.

        Args:
            force: Discard the stored token first so that a new exchange
                always happens.

        Raises:
            AuthError: If the token exchange fails.
        """
        if force:
            self._store.clear()
        return self._ensure_token(self._require_client())

    def dispatch(self, request: OperationRequest) -> ResponseEnvelope:
        """Send one operation and return the decoded envelope.

        The token check runs on every call; an expired or missing token is
        refreshed before the operation is sent.

        Args:
            request: The operation, as built by :mod:`textra.operations`.

        Returns:
            The ``resultset`` envelope, whatever its ``code``.

        Raises:
            AuthError: If a required token exchange fails. The API endpoint
                is not contacted in that case.
            RequestError: If the API request fails in transport or its body
                cannot be decoded.
        """
        http = self._require_client()
        token = self._ensure_token(http)
        output = get_output()

        form = build_form(request, self._credentials, token.value)
        output.debug(
            f"POST {self._settings.api_url} api_name={request.operation_name}"
            + (f" api_param={request.operation_param}" if request.operation_param else "")
        )
        try:
            response = http.post(
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

    def translate(
        self,
        text: str,
        api_name: str,
        api_param: Optional[str],
        options: Union[TranslateOptions, Mapping[str, Any], None] = None,
    ) -> ResponseEnvelope:
        """Translate *text* with the engine named by *api_name* / *api_param*.

        On success ``result`` holds a :class:`~textra.models.TranslateResult`
        payload; use ``envelope.result_as(TranslateResult)`` for typed access.
        """
        return self.dispatch(translate_request(text, api_name, api_param, options))

    def detect_language(self, text: str) -> ResponseEnvelope:
        """Detect the language of *text*."""
        return self.dispatch(detect_language_request(text))

    def split(self, text: str, lang: str, join: Union[int, bool] = 0) -> ResponseEnvelope:
        """Split *text* (in language *lang*) into sentences."""
        return self.dispatch(split_request(text, lang, join))

    def list_acquisition(
        self,
        api_name: str,
        options: Union[ListOptions, Mapping[str, Any], None] = None,
    ) -> ResponseEnvelope:
        """List the resources behind *api_name* (engines, glossaries, ...)."""
        return self.dispatch(list_request(api_name, options))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _require_client(self) -> httpx.Client:
        assert self._client is not None, "Client not initialised -- use as context manager"
        return self._client

    def _ensure_token(self, http: httpx.Client) -> Token:
        """Refresh the stored token if it is invalid, then return it.

        The re-check under the lock means threads that queued behind an
        in-flight refresh reuse its result instead of refreshing again.
        """
        token = self._store.current()
        if token is not None:
            return token

        with self._refresh_lock:
            token = self._store.current()
            if token is None:
                output = get_output()
                output.debug(f"Access token missing or expired; POST {self._authenticator.token_url}")
                token = self._authenticator.refresh(http)
                self._store.write(token)
                output.debug(
                    f"Access token obtained, valid for {self._store.seconds_remaining():.0f}s"
                )
            return token
