"""Canonical Pydantic models shared across all textra modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Client models** -- supplied once per client instance:
    :class:`Credentials`, :class:`ClientSettings`, and :class:`GlobalConfig`
    (the persisted form of both).

**Request models** -- built fresh for every call and never persisted:
    :class:`OperationRequest` plus the per-operation field models
    :class:`TranslateOptions`, :class:`SplitFields` and :class:`ListOptions`.

**Response models** -- decoded from the wire:
    :class:`Token` (from the token endpoint), :class:`ResponseEnvelope`
    and :class:`TranslateResult` (from the API endpoint).

All models use Pydantic v2. Models that mirror remote payloads use
``extra="allow"`` so that fields the service adds later survive decoding.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "https://mt-auto-minhon-mlt.ucri.jgn-x.jp"
TOKEN_PATH = "/oauth2/token.php"
API_PATH = "/api/"

KNOWN_RESULT_CODES: frozenset[int] = frozenset(
    {0, 500, 501, 502, 504, 505, 510, 511}
    | set(range(520, 526))
    | set(range(530, 534))
)
"""Every ``code`` value the remote service documents. ``0`` is success."""

RESERVED_FIELDS: frozenset[str] = frozenset(
    {"access_token", "key", "api_name", "api_param", "name", "type", "text"}
)
"""Form field names owned by the dispatcher; extra fields may not reuse them."""

FieldValue = Union[str, int, float]

_ModelT = TypeVar("_ModelT", bound=BaseModel)


# --- Client models ---


class Credentials(BaseModel):
    """Long-lived credentials issued by the service on registration.

    Immutable for the lifetime of a client instance. The secret is excluded
    from ``repr`` so that it never lands in logs or tracebacks.

    Example::

        Credentials(name="alice", key="0123abcd", secret="s3cr3t")
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Registered user name")
    key: str = Field(min_length=1, description="API key (OAuth2 client_id)")
    secret: str = Field(
        min_length=1, repr=False, description="API secret (OAuth2 client_secret)"
    )


class ClientSettings(BaseModel):
    """Transport settings for one client instance.

    ``timeout`` defaults to ``None``: a request waits for as long as the
    service takes. Callers wanting a bound set it here or wrap calls in
    :func:`asyncio.wait_for`.
    """

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Service root URL")
    timeout: Optional[float] = Field(
        default=None, description="Per-request timeout in seconds (None = wait forever)"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    token_leeway: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds before expiry at which a token is already treated as stale",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def token_url(self) -> str:
        """The OAuth2 token endpoint."""
        return f"{self.base_url}{TOKEN_PATH}"

    @property
    def api_url(self) -> str:
        """The single endpoint every operation is posted to."""
        return f"{self.base_url}{API_PATH}"


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/textra/config.json``.

    Credential values are never stored directly; ``key_source`` and
    ``secret_source`` hold source descriptors understood by
    :func:`~textra.config.resolve_credential` (``env:VAR``, ``file:/path``,
    ``prompt``).
    """

    name: Optional[str] = None
    key_source: str = "env:TEXTRA_KEY"
    secret_source: str = "env:TEXTRA_SECRET"
    base_url: str = DEFAULT_BASE_URL
    timeout: Optional[float] = None
    verify_ssl: bool = True
    default_api_name: str = "mt"
    default_api_param: Optional[str] = None

    def to_settings(self) -> ClientSettings:
        """Project the transport fields onto a :class:`ClientSettings`."""
        return ClientSettings(
            base_url=self.base_url,
            timeout=self.timeout,
            verify_ssl=self.verify_ssl,
        )


# --- Token ---


class Token(BaseModel):
    """A short-lived access token and the instant it stops being usable.

    ``expires_at`` is measured on the clock of the owning
    :class:`~textra.auth.token_store.TokenStore`.
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(repr=False)
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return bool(self.value) and now < self.expires_at


# --- Request models ---


class OperationRequest(BaseModel):
    """One call to the API endpoint, before auth fields are added.

    ``operation_param`` left as ``None`` or ``""`` means "use the service
    default" and keeps ``api_param`` off the wire entirely.
    """

    model_config = ConfigDict(frozen=True)

    operation_name: str = Field(min_length=1)
    operation_param: Optional[str] = None
    text: str = ""
    extra_fields: dict[str, FieldValue] = Field(default_factory=dict)

    @field_validator("extra_fields")
    @classmethod
    def _no_reserved_names(cls, value: dict[str, FieldValue]) -> dict[str, FieldValue]:
        clashes = sorted(RESERVED_FIELDS.intersection(value))
        if clashes:
            raise ValueError(f"extra fields may not override {', '.join(clashes)}")
        return value


class TranslateOptions(BaseModel):
    """Optional translate fields, echoed back by the service under ``request``.

    Only the fields that were explicitly set are sent. Numeric ids such as
    ``term_id=42`` are accepted and kept as strings.
    """

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    split: Optional[Literal[0, 1]] = None
    history: Optional[int] = None
    xml: Optional[str] = None
    term_id: Optional[str] = None
    bilingual_id: Optional[str] = None
    log_use: Optional[Literal[0, 1]] = None
    editor_use: Optional[Literal[0, 1]] = None
    data: Optional[str] = None

    def to_fields(self) -> dict[str, FieldValue]:
        return self.model_dump(exclude_none=True)


class SplitFields(BaseModel):
    """Fields required by the ``split`` operation."""

    model_config = ConfigDict(extra="forbid")

    lang: str = Field(min_length=1, description="Language code of the text, e.g. 'ja'")
    join: Literal[0, 1] = 0

    @field_validator("join", mode="before")
    @classmethod
    def _bool_to_flag(cls, value: Any) -> Any:
        if isinstance(value, bool):
            return int(value)
        return value

    def to_fields(self) -> dict[str, FieldValue]:
        return {"lang": self.lang, "join": self.join}


class ListOptions(BaseModel):
    """Open set of filters for list acquisition (``api_param="get"``).

    Any key is accepted; keys whose value is ``None`` are left off the wire.

    Example::

        ListOptions(limit=20, offset=40).to_fields()
        # {'limit': 20, 'offset': 40}
    """

    model_config = ConfigDict(extra="allow")

    def to_fields(self) -> dict[str, FieldValue]:
        fields: dict[str, FieldValue] = {}
        for key, value in (self.model_extra or {}).items():
            if value is None:
                continue
            if not isinstance(value, (str, int, float)):
                raise ValueError(f"list option '{key}' must be a string or number")
            fields[key] = value
        return fields


# --- Response models ---


class ResponseEnvelope(BaseModel):
    """The decoded ``resultset`` object returned by the API endpoint.

    ``code`` is kept as a plain integer: the service's status values are
    opaque enumerants and codes outside :data:`KNOWN_RESULT_CODES` must
    still decode. ``result`` is only present on success.
    """

    model_config = ConfigDict(extra="allow")

    code: int
    message: str = ""
    request: Optional[dict[str, Any]] = None
    result: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return self.code == 0

    @property
    def is_known_code(self) -> bool:
        return self.code in KNOWN_RESULT_CODES

    def result_as(self, model: type[_ModelT]) -> _ModelT:
        """Validate ``result`` into *model*.

        Raises:
            ValueError: If the envelope carries no result.
            pydantic.ValidationError: If the payload does not fit *model*.
        """
        if self.result is None:
            raise ValueError(f"envelope has no result (code {self.code}: {self.message})")
        return model.model_validate(self.result)


class TranslateResult(BaseModel):
    """The ``result`` payload of a translate call.

    ``information`` carries the per-sentence trace the service emits; its
    nested layout is left as plain JSON.
    """

    model_config = ConfigDict(extra="allow")

    text: str
    blank: int = 0
    information: Optional[dict[str, Any]] = None
