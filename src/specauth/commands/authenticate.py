"""The ``authenticate`` command.

Three ways to call it::

    specauth authenticate github                          # new account
    specauth authenticate github --as work                # edit "work"
    specauth authenticate github --as work --generate-token
"""

from __future__ import annotations

from typing import Optional

import typer

from specauth.commands import config_from_context
from specauth.exceptions import SpecauthError
from specauth.output import error, suggest


def authenticate_command(
    ctx: typer.Context,
    integration: str = typer.Argument(help="Integration to authenticate against."),
    alias: Optional[str] = typer.Option(
        None, "--as", help="Alias of an existing account to edit."
    ),
    generate_token: bool = typer.Option(
        False,
        "--generate-token",
        help="Start a local OAuth2 callback server and store the tokens it receives. "
        "Requires --as.",
    ),
) -> None:
    """Store credentials for an integration.

    Prompts for the fields the integration's security definition needs
    (username/password, an API key, or OAuth2 tokens) and saves them under
    an alias in ``<credentials-dir>/<integration>.json``.

    Raises:
        typer.Exit: With the error's exit code on any failure.
    """
    from specauth.auth.orchestrator import Authenticator

    try:
        config = config_from_context(ctx)
        stored = Authenticator(config).run(integration, alias=alias, generate_token=generate_token)
    except SpecauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if stored is not None:
        suggest(f"List accounts: specauth accounts list {integration}")
