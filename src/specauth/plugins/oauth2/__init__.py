"""OAuth2 credential scheme and authorization-code callback server.

Exports:
    :class:`OAuth2Scheme` -- asks for tokens and client credentials.
    :class:`OAuthCallbackServer` -- redeems an authorization code on a
    local listener and stores the resulting tokens.
"""

from specauth.plugins.oauth2.plugin import OAuth2Scheme, build_authorization_url
from specauth.plugins.oauth2.server import OAuthCallbackServer, ServerState

__all__ = ["OAuth2Scheme", "OAuthCallbackServer", "ServerState", "build_authorization_url"]
