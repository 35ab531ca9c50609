"""Per-client holder for the current access token.

A :class:`TokenStore` starts empty and is filled by the client after each
successful exchange with the token endpoint. Replacing the token is a single
attribute assignment, so a reader sees either the old token or the new one,
never a mix of both.

Each client instance owns its own store; there is no module-level token.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from textra.exceptions import NotAuthenticated
from textra.models import Token

Clock = Callable[[], float]


class TokenStore:
    """Hold one :class:`~textra.models.Token` and answer whether it is usable.

    Args:
        clock: Time source in seconds. Defaults to :func:`time.monotonic`
            so that wall-clock jumps cannot extend or cut a token's life.
            Tokens written to the store must be stamped on the same clock.
        leeway: Seconds before ``expires_at`` at which the token is already
            reported as invalid.

    Example::

        store = TokenStore()
        store.is_valid()          # False
        store.write(Token(value="abc", expires_at=store.now() + 3600))
        store.read().value        # 'abc'
    """

    def __init__(self, clock: Clock = time.monotonic, leeway: float = 0.0) -> None:
        self._clock = clock
        self._leeway = leeway
        self._token: Optional[Token] = None

    def now(self) -> float:
        """Current time on the store's clock."""
        return self._clock()

    def is_valid(self) -> bool:
        """True iff a token is present, non-empty, and not yet expired."""
        return self.current() is not None

    def current(self) -> Optional[Token]:
        """Return the stored token if it is still usable, else ``None``.

        The check and the returned object come from one read of the store,
        so a concurrent :meth:`clear` or :meth:`write` cannot slip in between.
        """
        token = self._token
        if token is None or not token.is_valid(self._clock() + self._leeway):
            return None
        return token

    def read(self) -> Token:
        """Return the current token, expired or not.

        Raises:
            NotAuthenticated: If no token has been written since creation
                or the last :meth:`clear`.
        """
        token = self._token
        if token is None:
            raise NotAuthenticated("No access token has been obtained yet")
        return token

    def write(self, token: Token) -> None:
        """Replace the stored token unconditionally."""
        self._token = token

    def clear(self) -> None:
        """Forget the stored token so the next dispatch re-authenticates."""
        self._token = None

    def seconds_remaining(self) -> float:
        """Seconds until the current token expires (0 when absent or expired)."""
        token = self._token
        if token is None:
            return 0.0
        return max(0.0, token.expires_at - self._clock())
