"""Named operations and the fields each one sends.

Every TexTra capability shares one endpoint and one auth mechanism; they
differ only in ``api_name``, ``api_param``, and a handful of extra fields.
The functions here build the matching
:class:`~textra.models.OperationRequest` and validate the extra fields
before anything touches the network. They hold no state and perform no
auth: the clients in :mod:`textra.client` wrap each one as a method and
hand the result to ``dispatch``.

Field errors surface as :class:`~textra.exceptions.InvalidUsageError`.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from textra.exceptions import InvalidUsageError
from textra.models import (
    ListOptions,
    OperationRequest,
    SplitFields,
    TranslateOptions,
)

LANGDETECT_API = "langdetect"
SPLIT_API = "split"
LIST_PARAM = "get"


def _invalid(operation: str, exc: Exception) -> InvalidUsageError:
    return InvalidUsageError(f"Invalid fields for {operation}: {exc}")


def translate_request(
    text: str,
    api_name: str,
    api_param: Optional[str],
    options: Union[TranslateOptions, Mapping[str, Any], None] = None,
) -> OperationRequest:
    """Build a translate call such as ``("Hello", "mt", "generalNT_en_ja")``."""
    try:
        if options is not None and not isinstance(options, TranslateOptions):
            options = TranslateOptions.model_validate(dict(options))
        return OperationRequest(
            operation_name=api_name,
            operation_param=api_param,
            text=text,
            extra_fields=options.to_fields() if options is not None else {},
        )
    except ValidationError as exc:
        raise _invalid("translate", exc) from exc


def detect_language_request(text: str) -> OperationRequest:
    """Build a language detection call. No ``api_param`` is sent."""
    return OperationRequest(operation_name=LANGDETECT_API, text=text)


def split_request(text: str, lang: str, join: Union[int, bool] = 0) -> OperationRequest:
    """Build a sentence split call.

    Args:
        text: Text to split into sentences.
        lang: Language code of *text*.
        join: ``1`` to have the service join the pieces back with newlines.
    """
    try:
        fields = SplitFields(lang=lang, join=join)
    except ValidationError as exc:
        raise _invalid("split", exc) from exc
    return OperationRequest(
        operation_name=SPLIT_API,
        operation_param="",
        text=text,
        extra_fields=fields.to_fields(),
    )


def list_request(
    api_name: str,
    options: Union[ListOptions, Mapping[str, Any], None] = None,
) -> OperationRequest:
    """Build a list acquisition call (``api_param="get"``, empty text).

    Args:
        api_name: The resource to list, e.g. ``"mt"`` or ``"term_root"``.
        options: Filters to send; keys mapped to ``None`` are dropped.
    """
    try:
        if options is None:
            options = ListOptions()
        elif not isinstance(options, ListOptions):
            options = ListOptions.model_validate(dict(options))
        return OperationRequest(
            operation_name=api_name,
            operation_param=LIST_PARAM,
            text="",
            extra_fields=options.to_fields(),
        )
    except (ValidationError, ValueError) as exc:
        raise _invalid("list", exc) from exc
