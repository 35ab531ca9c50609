"""API commands -- one sub-command per TexTra operation.

Each command resolves the effective configuration and credentials, opens a
:class:`~textra.client.TexTraClient`, runs one operation, and renders the
envelope. A non-zero envelope ``code`` is reported on stderr and turned into
:data:`~textra.exit_codes.EXIT_API_FAILURE`; transport and auth failures
exit with the code carried by the raised
:class:`~textra.exceptions.TexTraError`.

Typical usage::

    textra translate "Hello" -a mt -p generalNT_en_ja
    echo "今日は晴れ。明日は雨。" | textra split - --lang ja
    textra list mt --option limit=10
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import typer

from textra.client import TexTraClient
from textra.config import resolve_config, resolve_credentials
from textra.exceptions import InvalidUsageError, TexTraError
from textra.exit_codes import EXIT_API_FAILURE
from textra.models import GlobalConfig, ResponseEnvelope
from textra.output import OutputFormat, error, get_output, warning


def _read_text(text: str) -> str:
    """Return *text*, or all of stdin when *text* is ``-``."""
    if text == "-":
        return typer.get_text_stream("stdin").read()
    return text


def _parse_options(pairs: Optional[list[str]]) -> dict[str, Any]:
    """Parse repeated ``KEY=VALUE`` flags; ASCII digit-only values become ints."""
    options: dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Option must be KEY=VALUE, got '{pair}'")
        options[key] = int(value) if value.isascii() and value.isdecimal() else value
    return options


def _run(
    ctx: typer.Context,
    call: Callable[[TexTraClient, GlobalConfig], ResponseEnvelope],
) -> ResponseEnvelope:
    """Open a client from the resolved config, run *call*, map errors to exits."""
    obj = ctx.obj or {}
    try:
        config = resolve_config(cli_base_url=obj.get("base_url"))
        credentials = resolve_credentials(config)
        with TexTraClient(credentials, config.to_settings()) as client:
            return call(client, config)
    except TexTraError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _emit(envelope: ResponseEnvelope, text_only: bool = False) -> None:
    """Render *envelope* to stdout, or report its failure code on stderr."""
    output = get_output()
    if not envelope.is_known_code:
        warning(f"Unrecognised result code {envelope.code} from the service")
    if not envelope.ok:
        error(f"API returned code {envelope.code}: {envelope.message}")
        if output.format == OutputFormat.JSON:
            output.format_response(envelope.model_dump(exclude_none=True))
        raise typer.Exit(code=EXIT_API_FAILURE)

    if output.format == OutputFormat.JSON:
        output.format_response(envelope.model_dump(exclude_none=True))
    elif text_only and isinstance(envelope.result, dict) and "text" in envelope.result:
        output.print_data(str(envelope.result["text"]))
    else:
        output.format_response(envelope.result)


def translate_command(
    ctx: typer.Context,
    text: str = typer.Argument(help="Text to translate, or '-' to read stdin."),
    api_name: Optional[str] = typer.Option(
        None, "--api-name", "-a", help="API name (default from config, e.g. 'mt')."
    ),
    api_param: Optional[str] = typer.Option(
        None, "--api-param", "-p", help="Engine, e.g. 'generalNT_en_ja'."
    ),
    option: Optional[list[str]] = typer.Option(
        None, "--option", "-O", help="Extra field KEY=VALUE (split, history, term_id, ...)."
    ),
    full: bool = typer.Option(
        False, "--full", help="Print the whole result instead of only the translated text."
    ),
) -> None:
    """Translate text."""
    body = _read_text(text)

    def call(client: TexTraClient, config: GlobalConfig) -> ResponseEnvelope:
        return client.translate(
            body,
            api_name or config.default_api_name,
            api_param if api_param is not None else config.default_api_param,
            _parse_options(option) or None,
        )

    _emit(_run(ctx, call), text_only=not full)


def detect_command(
    ctx: typer.Context,
    text: str = typer.Argument(help="Text to inspect, or '-' to read stdin."),
) -> None:
    """Detect the language of text."""
    body = _read_text(text)
    _emit(_run(ctx, lambda client, _config: client.detect_language(body)))


def split_command(
    ctx: typer.Context,
    text: str = typer.Argument(help="Text to split, or '-' to read stdin."),
    lang: str = typer.Option(..., "--lang", "-l", help="Language code of the text."),
    join: bool = typer.Option(False, "--join", help="Join the sentences back with newlines."),
) -> None:
    """Split text into sentences."""
    body = _read_text(text)
    _emit(_run(ctx, lambda client, _config: client.split(body, lang, join)), text_only=True)


def list_command(
    ctx: typer.Context,
    api_name: str = typer.Argument(help="Resource to list, e.g. 'mt' or 'term_root'."),
    option: Optional[list[str]] = typer.Option(
        None, "--option", "-O", help="Filter KEY=VALUE (repeatable)."
    ),
) -> None:
    """List resources available to the account."""

    def call(client: TexTraClient, _config: GlobalConfig) -> ResponseEnvelope:
        return client.list_acquisition(api_name, _parse_options(option))

    _emit(_run(ctx, call))
