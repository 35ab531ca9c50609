"""textra -- client for the TexTra machine-translation service.

TexTra (``mt-auto-minhon-mlt.ucri.jgn-x.jp``) exposes translation, language
detection, sentence splitting, and resource listing through one
form-encoded endpoint guarded by OAuth2 client credentials. This package
handles the token exchange, caches the token until it expires, and decodes
the JSON envelope every operation returns.

Typical usage::

    from textra import Credentials, TexTraClient

    creds = Credentials(name="alice", key="...", secret="...")
    with TexTraClient(creds) as client:
        envelope = client.translate("Hello", "mt", "generalNT_en_ja")

Modules:
    client: Blocking and async clients.
    auth: Token store and OAuth2 authenticator.
    operations: Field marshaling for each named operation.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and credential resolution.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from textra.client import AsyncTexTraClient, TexTraClient  # noqa: E402
from textra.exceptions import (  # noqa: E402
    AuthError,
    InvalidUsageError,
    NotAuthenticated,
    RequestError,
    TexTraError,
)
from textra.models import (  # noqa: E402
    ClientSettings,
    Credentials,
    ListOptions,
    ResponseEnvelope,
    TranslateOptions,
    TranslateResult,
)

__all__ = [
    "AsyncTexTraClient",
    "AuthError",
    "ClientSettings",
    "Credentials",
    "InvalidUsageError",
    "ListOptions",
    "NotAuthenticated",
    "RequestError",
    "ResponseEnvelope",
    "TexTraClient",
    "TexTraError",
    "TranslateOptions",
    "TranslateResult",
    "__version__",
]
