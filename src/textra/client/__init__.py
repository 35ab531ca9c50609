"""HTTP clients for the TexTra API.

Provides blocking and asynchronous clients that wrap :mod:`httpx` with the
OAuth2 token lifecycle and the shared form-encoded dispatch path.

Classes:
    :class:`TexTraClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncTexTraClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.

Both clients are used as context managers and take the same arguments:
:class:`~textra.models.Credentials`, optional
:class:`~textra.models.ClientSettings`, an optional
:class:`~textra.auth.token_store.TokenStore`, and an optional transport.

Example::

    from textra.client import TexTraClient

    with TexTraClient(credentials) as client:
        envelope = client.translate("Hello", "mt", "generalNT_en_ja")
"""

from textra.client.async_client import AsyncTexTraClient
from textra.client.sync_client import TexTraClient

__all__ = ["TexTraClient", "AsyncTexTraClient"]
