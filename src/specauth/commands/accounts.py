"""Account commands -- inspect and remove stored accounts.

Only aliases, security definitions and field *names* are ever shown;
stored values never leave the credential file.

Typical workflow::

    specauth accounts list github
    specauth accounts remove github work
"""

from __future__ import annotations

import typer

from specauth.auth.credential_store import CredentialStore
from specauth.commands import config_from_context
from specauth.exceptions import AccountNotFoundError, SpecauthError
from specauth.output import error, info, print_table, success, suggest


accounts_app = typer.Typer(no_args_is_help=True)


@accounts_app.command("list")
def accounts_list(
    ctx: typer.Context,
    integration: str = typer.Argument(help="Integration whose accounts to list."),
) -> None:
    """List the accounts stored for an integration.

    Example::

        specauth accounts list github
        specauth --json accounts list github
    """
    try:
        config = config_from_context(ctx)
        accounts = CredentialStore(config.credentials_dir).load(integration)
    except SpecauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not accounts:
        info(f"No accounts stored for {integration}.")
        suggest(f"Add one: specauth authenticate {integration}")
        return

    rows = [
        [alias, account.security_definition, ", ".join(account.field_names())]
        for alias, account in sorted(accounts.items())
    ]
    print_table(["alias", "securityDefinition", "fields"], rows, title=f"{integration} accounts")


@accounts_app.command("remove")
def accounts_remove(
    ctx: typer.Context,
    integration: str = typer.Argument(help="Integration the account belongs to."),
    alias: str = typer.Argument(help="Alias of the account to remove."),
) -> None:
    """Remove one stored account.

    Asks for confirmation unless the ``--force`` flag is active.

    Example::

        specauth accounts remove github work
        specauth --force accounts remove github work
    """
    try:
        config = config_from_context(ctx)
        store = CredentialStore(config.credentials_dir)
        accounts = store.load(integration)
        if alias not in accounts:
            raise AccountNotFoundError(integration, alias)
    except SpecauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm(f'Remove account "{alias}" from {integration}?')
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    del accounts[alias]
    try:
        store.save(integration, accounts)
    except SpecauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f'Account "{alias}" removed from {integration}.')
