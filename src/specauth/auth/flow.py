"""Interactive creation and editing of stored accounts.

:class:`CredentialFlow` asks the questions of the definition's
:class:`~specauth.auth.base.CredentialScheme`, then either merges the
answers into the account being edited or stores them under a new alias,
and saves the whole collection.
"""

from __future__ import annotations

from typing import Optional

from specauth.auth.credential_store import CredentialStore
from specauth.auth.manager import AuthManager
from specauth.exceptions import AccountNotFoundError, InvalidUsageError
from specauth.models import (
    Account,
    AccountCollection,
    AppConfig,
    Question,
    SecurityDefinition,
    SecurityType,
)
from specauth.output import debug, info, print_url, success
from specauth.plugins.oauth2.plugin import apply_provider_fixups, build_authorization_url
from specauth.prompts import AnswerCollector

ALIAS_QUESTION = Question(key="alias", prompt="Choose an alias for this account")


class CredentialFlow:
    """Collect credentials for one security definition and store them.

    Args:
        store: Where the collection is saved.
        collector: Where questions are asked.
        manager: Resolves the scheme for a definition's type.
        config: Resolved configuration; supplies the OAuth2 redirect URI.
    """

    def __init__(
        self,
        store: CredentialStore,
        collector: AnswerCollector,
        manager: AuthManager,
        config: AppConfig,
    ) -> None:
        self._store = store
        self._collector = collector
        self._manager = manager
        self._config = config

    def run(
        self,
        integration_name: str,
        definition: SecurityDefinition,
        accounts: AccountCollection,
        alias: Optional[str] = None,
    ) -> str:
        """Create a new account, or edit the one stored under *alias*.

        When editing, the current values are offered as defaults and blank
        answers keep them. When creating, the alias is asked last; an
        existing account with that alias is replaced.

        Args:
            integration_name: Integration the accounts belong to.
            definition: The selected security definition.
            accounts: The loaded collection; updated in place and saved.
            alias: The account to edit, or ``None`` to create one.

        Returns:
            The alias the account was stored under.

        Raises:
            AccountNotFoundError: *alias* is not in *accounts*.
            InvalidUsageError: The new alias is empty.
            StoreError: The collection cannot be saved.
        """
        scheme = self._manager.get_scheme(definition.type)

        existing: Optional[Account] = None
        if alias is not None:
            existing = accounts.get(alias)
            if existing is None:
                raise AccountNotFoundError(integration_name, alias)
            if definition.type == SecurityType.OAUTH2:
                self._show_authorization_url(integration_name, definition, existing)

        answers = self._collector.ask(scheme.questions_for(existing))

        if existing is not None:
            accounts[alias] = scheme.merge(existing, answers, definition.name)
        else:
            account = scheme.build_account(answers, definition.name)
            alias = self._ask_alias(integration_name, accounts)
            accounts[alias] = account

        self._store.save(integration_name, accounts)
        success(f"Stored account {alias} for {integration_name}")
        return alias

    def _ask_alias(self, integration_name: str, accounts: AccountCollection) -> str:
        alias = self._collector.ask([ALIAS_QUESTION])[ALIAS_QUESTION.key].strip()
        if not alias:
            raise InvalidUsageError("The account alias cannot be empty")
        if alias in accounts:
            debug(f"Replacing existing account {alias} for {integration_name}")
        return alias

    def _show_authorization_url(
        self,
        integration_name: str,
        definition: SecurityDefinition,
        account: Account,
    ) -> None:
        definition = apply_provider_fixups(integration_name, definition)
        if not definition.authorization_url:
            debug(f"Security definition {definition.name} has no authorizationUrl")
            return
        info("You can retrieve an access token here:")
        print_url(
            build_authorization_url(definition, account.client_id, self._config.redirect_uri)
        )
