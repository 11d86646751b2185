"""API key credential scheme.

Stores a single ``api_key`` for security definitions of type ``apiKey``.
Where the key is sent (header, query, cookie) is the integration's concern
and is not recorded with the account.

See Also:
    :class:`specauth.auth.base.CredentialScheme` for the base interface.
"""

from __future__ import annotations

from specauth.auth.base import CredentialScheme
from specauth.models import Question, SecurityType


class APIKeyScheme(CredentialScheme):
    """Collect an API key."""

    @property
    def security_type(self) -> SecurityType:
        return SecurityType.API_KEY

    @property
    def questions(self) -> tuple[Question, ...]:
        return (Question(key="api_key", prompt="api_key"),)
