"""Top-level authentication run: load, select, then collect or redeem.

:class:`Authenticator` wires the pieces together for the three ways the
``authenticate`` command can be invoked:

* no alias -- create a new account (:class:`~specauth.auth.flow.CredentialFlow`);
* ``--as ALIAS`` -- edit that account (same flow, answers pre-filled);
* ``--as ALIAS --generate-token`` -- redeem an OAuth2 authorization code
  for that account
  (:class:`~specauth.plugins.oauth2.server.OAuthCallbackServer`).
"""

from __future__ import annotations

from typing import Callable, Optional

from specauth.auth.credential_store import CredentialStore
from specauth.auth.flow import CredentialFlow
from specauth.auth.manager import AuthManager, create_default_manager
from specauth.auth.selector import select_security_definition
from specauth.exceptions import ConfigurationError, InvalidUsageError
from specauth.models import AppConfig, Integration, SecurityType
from specauth.parser import load_integration
from specauth.plugins.oauth2.server import OAuthCallbackServer
from specauth.prompts import AnswerCollector, ConsoleAnswerCollector

IntegrationLoader = Callable[[str, AppConfig], Integration]


class Authenticator:
    """Run one authentication for a named integration.

    Args:
        config: Resolved configuration.
        collector: Where questions are asked. Defaults to the terminal.
        manager: Scheme registry. Defaults to the built-in schemes.
        store: Credential store. Defaults to one over
            ``config.credentials_dir``.
        loader: Resolves an integration name to an
            :class:`~specauth.models.Integration`.
    """

    def __init__(
        self,
        config: AppConfig,
        collector: Optional[AnswerCollector] = None,
        manager: Optional[AuthManager] = None,
        store: Optional[CredentialStore] = None,
        loader: IntegrationLoader = load_integration,
    ) -> None:
        self._config = config
        self._collector = collector or ConsoleAnswerCollector()
        self._manager = manager or create_default_manager()
        self._store = store or CredentialStore(config.credentials_dir)
        self._loader = loader

    def run(
        self,
        integration_name: str,
        alias: Optional[str] = None,
        generate_token: bool = False,
    ) -> Optional[str]:
        """Authenticate against *integration_name*.

        Every lookup happens before the first prompt, so a missing
        integration, alias or definition fails without asking anything
        and without touching the filesystem.

        Returns:
            The alias that was stored, or ``None`` when the OAuth2 listener
            closed without redeeming a code.

        Raises:
            InvalidUsageError: *generate_token* without an *alias*.
            IntegrationError: The integration cannot be loaded.
            ConfigurationError: Selection failed, or *generate_token* on a
                definition that is not ``oauth2``.
            StoreError: The store cannot be read or written.
            NetworkError: The OAuth2 listener or token exchange failed.
            ProviderError: The token endpoint rejected the exchange.
        """
        if generate_token and alias is None:
            raise InvalidUsageError("--generate-token requires --as ALIAS (an existing account)")

        integration = self._loader(integration_name, self._config)
        accounts = self._store.load(integration.name)
        definition = select_security_definition(integration, accounts, alias, self._collector)
        self._store.ensure_directory()

        if generate_token:
            if definition.type != SecurityType.OAUTH2:
                raise ConfigurationError(
                    f"Account {alias} for {integration.name} uses {definition.label}; "
                    "--generate-token only works with oauth2 definitions"
                )
            server = OAuthCallbackServer(
                self._config, self._store, integration.name, definition, accounts, alias
            )
            redeemed = server.run()
            return alias if redeemed is not None else None

        flow = CredentialFlow(self._store, self._collector, self._manager, self._config)
        return flow.run(integration.name, definition, accounts, alias)
