"""Auth commands -- check that the configured credentials work.

``textra auth test`` performs one OAuth2 client-credentials exchange with
the configured key and secret and reports how long the issued token is
valid. The token itself is never printed.
"""

from __future__ import annotations

import typer

from textra.output import error, info, success


auth_app = typer.Typer(no_args_is_help=True)


@auth_app.command("test")
def auth_test(ctx: typer.Context) -> None:
    """Exchange the configured credentials for a token.

    Example::

        textra auth test
    """
    from textra.client import TexTraClient
    from textra.config import resolve_config, resolve_credentials
    from textra.exceptions import TexTraError

    obj = ctx.obj or {}
    try:
        config = resolve_config(cli_base_url=obj.get("base_url"))
        credentials = resolve_credentials(config)
        info(f"Requesting token for '{credentials.name}' from {config.to_settings().token_url}")
        with TexTraClient(credentials, config.to_settings()) as client:
            client.authenticate(force=True)
            remaining = client.token_store.seconds_remaining()
    except TexTraError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Authenticated. Token valid for {remaining:.0f}s.")
