"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~textra.exceptions.TexTraError` subclass.
Shell wrappers can inspect the exit code to tell a rejected token exchange
from a declined translation without parsing stderr.

Example::

    $ textra translate "Hello" -a mt -p generalNT_en_ja
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the token endpoint rejected the credentials
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or operation fields."""

EXIT_AUTH_FAILURE = 3
"""The OAuth2 token exchange failed."""

EXIT_REQUEST_FAILURE = 6
"""The API request could not be sent or its response could not be decoded."""

EXIT_API_FAILURE = 8
"""The API answered with a non-zero result code (the operation was declined)."""
