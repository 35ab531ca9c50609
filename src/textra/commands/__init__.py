"""Built-in CLI commands for textra.

Each module defines either a Typer sub-application or plain command
functions that :mod:`textra.app` attaches to the root app:

- :mod:`~textra.commands.api` -- ``translate``, ``detect``, ``split``, ``list``.
- :mod:`~textra.commands.auth` -- ``auth test``.
- :mod:`~textra.commands.config` -- ``config show|path|set|reset``.
"""

from textra.commands.api import detect_command, list_command, split_command, translate_command
from textra.commands.auth import auth_app
from textra.commands.config import config_app

__all__ = [
    "auth_app",
    "config_app",
    "detect_command",
    "list_command",
    "split_command",
    "translate_command",
]
