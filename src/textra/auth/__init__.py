"""OAuth2 client-credentials authentication for textra.

The package has two pieces:

- :class:`TokenStore` -- holds the current token for one client instance
  and answers whether it is still usable.
- :class:`Authenticator` -- performs the exchange with the token endpoint
  and returns a new token without storing it.

The clients in :mod:`textra.client` combine them: before every dispatch they
ask the store, and only when it reports the token invalid do they call the
authenticator and write the result back.
"""

from textra.auth.authenticator import Authenticator
from textra.auth.token_store import TokenStore

__all__ = ["Authenticator", "TokenStore"]
