"""Exception hierarchy for textra.

All exceptions inherit from :class:`TexTraError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`textra.exit_codes`.
The CLI entry point catches ``TexTraError`` and exits with the matching
code.

Only transport and decode failures are exceptions. A response envelope with
a non-zero ``code`` is returned to the caller as ordinary data.

Subclass hierarchy::

    TexTraError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    |   +-- NotAuthenticated
    +-- RequestError        (exit 6)
    +-- ConfigError         (exit 1)
"""

from textra.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REQUEST_FAILURE,
)


class TexTraError(Exception):
    """Base exception for all textra errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(TexTraError):
    """Raised for invalid CLI arguments or operation fields rejected at call time."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(TexTraError):
    """Raised when the OAuth2 token exchange fails (transport, empty body, bad payload)."""

    exit_code = EXIT_AUTH_FAILURE


class NotAuthenticated(AuthError):
    """Raised when a token is read from a store that has never been written."""


class RequestError(TexTraError):
    """Raised when an API request fails in transport or its body cannot be decoded."""

    exit_code = EXIT_REQUEST_FAILURE


class ConfigError(TexTraError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
