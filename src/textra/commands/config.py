"""Config commands -- view and modify the global configuration.

Provides the ``textra config`` sub-command group for reading, updating,
and resetting the user's configuration file
(:class:`~textra.models.GlobalConfig`). Settings hold the registered name,
where the API key and secret come from, and transport defaults.
"""

from __future__ import annotations

import typer

from textra.exit_codes import EXIT_INVALID_USAGE
from textra.output import error, format_response, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        textra config show
        textra --json config show
    """
    from textra.config import config_path, load_global_config
    from textra.exceptions import ConfigError

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config file: {config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("path")
def config_path_command() -> None:
    """Print the path of the configuration file."""
    from textra.config import config_path

    print_data(str(config_path()))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. 'name' or 'timeout'."),
    value: str = typer.Argument(help="Value to set (JSON literals like 30 or null accepted)."),
) -> None:
    """Set a configuration value.

    Example::

        textra config set name alice
        textra config set secret_source file:~/.textra-secret
        textra config set timeout 30
    """
    from textra.config import set_config_value
    from textra.exceptions import ConfigError

    try:
        config = set_config_value(key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    success(f"Set {key} = {getattr(config, key)}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults."""
    from textra.config import save_global_config
    from textra.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
