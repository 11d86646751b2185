"""Built-in CLI sub-commands for specauth.

* :mod:`~specauth.commands.authenticate` -- create or edit an account, or
  redeem an OAuth2 authorization code for one.
* :mod:`~specauth.commands.accounts` -- list and remove stored accounts.

``authenticate`` is a plain callback registered directly on the root app;
``accounts`` is a :class:`typer.Typer` sub-application.
"""

from __future__ import annotations

from typing import Any

import typer

from specauth.config import resolve_config
from specauth.models import AppConfig


def config_from_context(ctx: typer.Context) -> AppConfig:
    """Resolve the configuration using the root options stored on *ctx*.

    Raises:
        ConfigurationError: If the resolved configuration is invalid.
    """
    obj: dict[str, Any] = ctx.obj or {}
    return resolve_config(
        cli_credentials_dir=obj.get("credentials_dir"),
        cli_integrations_dir=obj.get("integrations_dir"),
        cli_port=obj.get("port"),
    )
