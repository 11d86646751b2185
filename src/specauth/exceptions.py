"""Exception hierarchy for specauth.

All exceptions inherit from :class:`SpecauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specauth.exit_codes`.
Commands catch ``SpecauthError``, print the message, and exit with that
code. Every error is terminal for the current invocation; nothing is
retried.

Messages name the integration, alias, or security definition involved but
never include secret values (passwords, client secrets, tokens).

Subclass hierarchy::

    SpecauthError (exit 1)
    +-- InvalidUsageError                    (exit 2)
    +-- ConfigurationError                   (exit 3)
    |   +-- NoSecurityDefinitionsError
    |   +-- AccountNotFoundError
    |   +-- SecurityDefinitionNotFoundError
    +-- StoreError                           (exit 4)
    |   +-- MalformedStoreError
    |   +-- StoreWriteError
    +-- NetworkError                         (exit 5)
    |   +-- OAuthTimeoutError
    +-- ProviderError                        (exit 6)
    +-- IntegrationError                     (exit 7)
"""

from __future__ import annotations

from specauth.exit_codes import (
    EXIT_CONFIGURATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INTEGRATION_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_NETWORK_ERROR,
    EXIT_PROVIDER_ERROR,
    EXIT_STORE_ERROR,
)


class SpecauthError(Exception):
    """Base exception for all specauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecauthError):
    """Raised for invalid option combinations or when no interactive terminal is available."""

    exit_code = EXIT_INVALID_USAGE


# --- Configuration ---


class ConfigurationError(SpecauthError):
    """Raised when security definitions, accounts, or settings are unusable."""

    exit_code = EXIT_CONFIGURATION_ERROR


class NoSecurityDefinitionsError(ConfigurationError):
    """The integration declares no security definitions at all."""

    def __init__(self, integration: str):
        super().__init__(f"No security definitions found for {integration}")
        self.integration = integration


class AccountNotFoundError(ConfigurationError):
    """The alias named on the command line is not stored for the integration."""

    def __init__(self, integration: str, alias: str):
        super().__init__(f"Account {alias} not found for {integration}")
        self.integration = integration
        self.alias = alias


class SecurityDefinitionNotFoundError(ConfigurationError):
    """An account references a security definition the integration no longer has."""

    def __init__(self, integration: str, definition: str, alias: str | None = None):
        message = f"Security definition {definition} not found for {integration}"
        if alias:
            message += f" (referenced by account {alias})"
        super().__init__(message)
        self.integration = integration
        self.definition = definition
        self.alias = alias


# --- Credential store ---


class StoreError(SpecauthError):
    """Raised when the credential store cannot be read or written."""

    exit_code = EXIT_STORE_ERROR


class MalformedStoreError(StoreError):
    """The credential file exists but does not hold a JSON object of accounts."""


class StoreWriteError(StoreError):
    """The credentials directory or file could not be written."""


# --- Network and provider ---


class NetworkError(SpecauthError):
    """Raised on listener bind failures and token-exchange transport failures."""

    exit_code = EXIT_NETWORK_ERROR


class OAuthTimeoutError(NetworkError):
    """No redirect reached the local callback server before the deadline."""


class ProviderError(SpecauthError):
    """Raised when the token endpoint answers with an error or without tokens."""

    exit_code = EXIT_PROVIDER_ERROR


class IntegrationError(SpecauthError):
    """Raised when an integration document cannot be located or parsed."""

    exit_code = EXIT_INTEGRATION_ERROR
