"""OAuth2 credential scheme and authorization URL construction.

This module provides :class:`OAuth2Scheme`, which stores OAuth2 tokens for
security definitions of type ``oauth2``, plus the helpers shared with the
callback server in :mod:`specauth.plugins.oauth2.server`:

* :func:`build_authorization_url` -- the provider URL the user opens to
  grant access.
* :func:`generate_state` -- the random ``state`` nonce sent with it.
* :func:`apply_provider_fixups` -- per-integration corrections for
  providers whose published definitions are not usable as-is.

Only the authorization-code flow is supported.

See Also:
    :class:`specauth.auth.base.CredentialScheme` for the base interface.
"""

from __future__ import annotations

import secrets
from typing import Any, Optional
from urllib.parse import urlencode

from specauth.auth.base import CredentialScheme
from specauth.models import Question, SecurityDefinition, SecurityType

AUTHORIZATION_CODE_FLOW = "accessCode"

# Integration name -> replacement SecurityDefinition fields.
PROVIDER_FIXUPS: dict[str, dict[str, Any]] = {
    "gmail": {
        "flow": AUTHORIZATION_CODE_FLOW,
        "token_url": "https://www.googleapis.com/oauth2/v4/token",
    },
}

_QUESTIONS = (
    Question(key="access_token", prompt="access_token"),
    Question(key="refresh_token", prompt="refresh_token (optional)"),
    Question(key="client_id", prompt="client_id (optional)"),
    Question(key="client_secret", prompt="client_secret (optional)", secret=True),
)


class OAuth2Scheme(CredentialScheme):
    """Collect OAuth2 tokens and, optionally, the client credentials.

    Only ``access_token`` is expected; the refresh token and client
    credentials may be left blank. ``client_id`` and ``client_secret`` are
    what the callback server later needs to redeem an authorization code.
    """

    @property
    def security_type(self) -> SecurityType:
        return SecurityType.OAUTH2

    @property
    def questions(self) -> tuple[Question, ...]:
        return _QUESTIONS


def generate_state() -> str:
    """Return a random numeric ``state`` nonce for an authorization request."""
    return str(secrets.randbelow(10**16))


def build_authorization_url(
    definition: SecurityDefinition,
    client_id: Optional[str],
    redirect_uri: str,
    state: Optional[str] = None,
) -> str:
    """Build the provider URL that starts the authorization-code flow.

    The query carries, in order: ``response_type=code``, ``redirect_uri``,
    ``client_id`` (when known), ``access_type=offline``, ``scope`` and
    ``state``. Only the first declared scope is requested.

    Args:
        definition: An ``oauth2`` security definition with an
            ``authorization_url``.
        client_id: The OAuth2 client identifier, if one is on file.
        redirect_uri: Where the provider sends the browser afterwards.
        state: The ``state`` nonce; a fresh one is generated when omitted.

    Returns:
        The complete authorization URL.

    Raises:
        ValueError: If the definition has no ``authorization_url``.
    """
    if not definition.authorization_url:
        raise ValueError(f"Security definition {definition.name} has no authorizationUrl")

    params: dict[str, str] = {
        "response_type": "code",
        "redirect_uri": redirect_uri,
    }
    if client_id:
        params["client_id"] = client_id
    params["access_type"] = "offline"
    scopes = list(definition.scopes)
    if scopes:
        params["scope"] = scopes[0]
    params["state"] = state if state is not None else generate_state()

    separator = "&" if "?" in definition.authorization_url else "?"
    return f"{definition.authorization_url}{separator}{urlencode(params)}"


def apply_provider_fixups(integration_name: str, definition: SecurityDefinition) -> SecurityDefinition:
    """Return *definition* with any known provider corrections applied.

    The original definition is frozen and left untouched; a corrected copy
    is returned when *integration_name* has fixups registered in
    :data:`PROVIDER_FIXUPS`.
    """
    fixups = PROVIDER_FIXUPS.get(integration_name)
    if not fixups:
        return definition
    return definition.model_copy(update=fixups)
