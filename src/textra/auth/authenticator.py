"""OAuth2 client-credentials exchange against the TexTra token endpoint.

This module provides :class:`Authenticator`, which performs the
non-interactive Client Credentials grant (:rfc:`6749` section 4.4):
the registered ``key`` and ``secret`` are posted as ``client_id`` and
``client_secret`` and a short-lived access token comes back.

The service additionally requires the token endpoint's own URL in an
``urlAccessToken`` field; it is sent verbatim on every exchange.

Both a blocking (:meth:`Authenticator.refresh`) and an async
(:meth:`Authenticator.arefresh`) variant are provided. They share the same
request fields and the same response parser, so the two clients accept and
reject exactly the same token payloads.

See Also:
    :class:`~textra.auth.token_store.TokenStore` -- where the result is kept.
"""

from __future__ import annotations

from typing import Any

import httpx

from textra.auth.token_store import Clock
from textra.exceptions import AuthError
from textra.models import Credentials, Token


class Authenticator:
    """Exchange :class:`~textra.models.Credentials` for a :class:`~textra.models.Token`.

    The authenticator holds no token itself; callers write the returned
    token into their :class:`~textra.auth.token_store.TokenStore`.

    Args:
        credentials: The client's registered name, key, and secret.
        token_url: Absolute URL of the token endpoint.
        clock: Time source used to stamp ``expires_at``. Must be the clock
            of the store the token will be written to.
    """

    def __init__(self, credentials: Credentials, token_url: str, clock: Clock) -> None:
        self._credentials = credentials
        self._token_url = token_url
        self._clock = clock

    @property
    def token_url(self) -> str:
        return self._token_url

    def form(self) -> dict[str, str]:
        """Return the form fields posted to the token endpoint."""
        return {
            "grant_type": "client_credentials",
            "client_id": self._credentials.key,
            "client_secret": self._credentials.secret,
            "urlAccessToken": self._token_url,
        }

    def refresh(self, http: httpx.Client) -> Token:
        """Fetch a fresh token over a blocking client.

        Args:
            http: The client used for the POST.

        Returns:
            A valid :class:`~textra.models.Token`.

        Raises:
            AuthError: If the request fails, the body is empty or not JSON,
                or ``access_token`` / ``expires_in`` are missing or invalid.
        """
        try:
            response = http.post(
                self._token_url,
                data=self.form(),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"Token request failed: {exc}") from exc
        return self._parse(response)

    async def arefresh(self, http: httpx.AsyncClient) -> Token:
        """Fetch a fresh token over an async client.

        Behaves identically to :meth:`refresh` but is non-blocking.
        """
        try:
            response = await http.post(
                self._token_url,
                data=self.form(),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"Token request failed: {exc}") from exc
        return self._parse(response)

    def _parse(self, response: httpx.Response) -> Token:
        """Turn a token endpoint response into a :class:`Token`, or raise."""
        if response.status_code >= 400:
            raise AuthError(
                f"Token request failed with status {response.status_code}: "
                f"{response.text[:200]}"
            )
        if not response.content or not response.content.strip():
            raise AuthError("OAuth2 Error. API response data is empty.")

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise AuthError(f"OAuth2 Error. Token response is not valid JSON: {exc}") from exc

        if not isinstance(payload, dict):
            raise AuthError("OAuth2 Error. Token response is not a JSON object")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("Token response missing 'access_token' field")

        expires_in = _coerce_expires_in(payload.get("expires_in"))
        return Token(value=access_token, expires_at=self._clock() + expires_in)


def _coerce_expires_in(value: Any) -> int:
    """Validate ``expires_in`` as a non-negative number of seconds."""
    if value is None:
        raise AuthError("Token response missing 'expires_in' field")
    if isinstance(value, bool):
        raise AuthError(f"Token response has invalid 'expires_in': {value!r}")
    if isinstance(value, str) and _is_ascii_number(value.strip()):
        value = int(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise AuthError(f"Token response has invalid 'expires_in': {value!r}")
    return value


def _is_ascii_number(text: str) -> bool:
    """True for strings ``int()`` accepts as plain ASCII digits, e.g. ``"3600"``."""
    return text.isascii() and text.isdecimal()
