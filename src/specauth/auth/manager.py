"""Scheme registry -- maps each security type to its credential scheme.

The set of security types is closed (:class:`~specauth.models.SecurityType`),
so the registry is keyed by the enum rather than free-form strings. Call
:func:`create_default_manager` to get a manager holding every built-in
scheme.

See Also:
    :class:`~specauth.auth.base.CredentialScheme` -- the scheme interface.
    :class:`~specauth.auth.flow.CredentialFlow` -- the main consumer.
"""

from __future__ import annotations

from specauth.auth.base import CredentialScheme
from specauth.exceptions import ConfigurationError
from specauth.models import SecurityType


class AuthManager:
    """Registry of :class:`~specauth.auth.base.CredentialScheme` instances.

    Example::

        from specauth.auth import AuthManager
        from specauth.plugins.basic import BasicScheme

        manager = AuthManager()
        manager.register(BasicScheme())
        scheme = manager.get_scheme(SecurityType.BASIC)
    """

    def __init__(self) -> None:
        self._schemes: dict[SecurityType, CredentialScheme] = {}

    def register(self, scheme: CredentialScheme) -> None:
        """Register *scheme* under its :attr:`~CredentialScheme.security_type`.

        A scheme already registered for the same type is replaced.
        """
        self._schemes[scheme.security_type] = scheme

    def get_scheme(self, security_type: SecurityType) -> CredentialScheme:
        """Return the scheme for *security_type*.

        Raises:
            ConfigurationError: If no scheme is registered for the type.
        """
        scheme = self._schemes.get(security_type)
        if scheme is None:
            available = ", ".join(t.value for t in self.list_types()) or "(none)"
            raise ConfigurationError(
                f"No credential scheme registered for type '{security_type.value}'. "
                f"Available types: {available}"
            )
        return scheme

    def list_types(self) -> list[SecurityType]:
        """Return the registered security types, sorted by value."""
        return sorted(self._schemes, key=lambda t: t.value)


def create_default_manager() -> AuthManager:
    """Create an :class:`AuthManager` holding the built-in schemes.

    - ``basic`` -- username and password.
    - ``apiKey`` -- a single API key.
    - ``oauth2`` -- access/refresh tokens and client credentials.

    Returns:
        A fully initialised :class:`AuthManager`.
    """
    from specauth.plugins.api_key import APIKeyScheme
    from specauth.plugins.basic import BasicScheme
    from specauth.plugins.oauth2 import OAuth2Scheme

    manager = AuthManager()
    manager.register(BasicScheme())
    manager.register(APIKeyScheme())
    manager.register(OAuth2Scheme())
    return manager
