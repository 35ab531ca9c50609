"""Wire format shared by the blocking and async clients.

Two pure functions sit between the clients and :mod:`httpx`:

- :func:`build_form` -- turns an :class:`~textra.models.OperationRequest`
  plus the caller's identity into the form body posted to the API endpoint.
- :func:`decode_envelope` -- turns the API endpoint's response into a
  :class:`~textra.models.ResponseEnvelope`, unwrapping the ``resultset``
  key the service nests everything under.

Keeping them here means both clients put exactly the same fields on the wire
and reject exactly the same bodies.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from textra.exceptions import RequestError
from textra.models import Credentials, FieldValue, OperationRequest, ResponseEnvelope

RESULTSET_KEY = "resultset"


def stringify(value: FieldValue) -> str:
    """Render a field value the way the service expects it in a form body.

    Booleans become ``"1"`` / ``"0"``; everything else goes through :func:`str`.
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def build_form(
    request: OperationRequest,
    credentials: Credentials,
    access_token: str,
) -> dict[str, str]:
    """Build the form body for one API call.

    ``api_param`` is only present when the request carries a non-empty
    ``operation_param``; the service reads its absence as "use the default".

    Args:
        request: The operation to perform.
        credentials: Supplies ``key`` and ``name``.
        access_token: A currently valid token value.

    Returns:
        A flat ``str -> str`` mapping ready for ``httpx``'s ``data=``.
    """
    form: dict[str, str] = {
        "access_token": access_token,
        "key": credentials.key,
        "api_name": request.operation_name,
        "name": credentials.name,
        "type": "json",
        "text": request.text,
    }
    if request.operation_param:
        form["api_param"] = request.operation_param
    for field_name, value in request.extra_fields.items():
        form[field_name] = stringify(value)
    return form


def decode_envelope(response: httpx.Response) -> ResponseEnvelope:
    """Decode an API endpoint response into a :class:`ResponseEnvelope`.

    The HTTP status is not interpreted when the body carries a well-formed
    ``resultset``; the envelope's own ``code`` is what callers branch on.

    Raises:
        RequestError: If the body is empty, is not JSON, or has no
            ``resultset`` object.
    """
    if not response.content or not response.content.strip():
        raise RequestError(
            f"Translate Error. API response data is empty (HTTP {response.status_code})."
        )

    try:
        payload: Any = response.json()
    except ValueError as exc:
        raise RequestError(
            f"API response is not valid JSON (HTTP {response.status_code}): {exc}"
        ) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get(RESULTSET_KEY), dict):
        raise RequestError(
            f"API response has no '{RESULTSET_KEY}' object (HTTP {response.status_code})"
        )

    try:
        return ResponseEnvelope.model_validate(payload[RESULTSET_KEY])
    except ValidationError as exc:
        raise RequestError(f"API response envelope is malformed: {exc}") from exc
