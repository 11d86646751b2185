"""Built-in credential schemes, one sub-package per security type.

* :mod:`~specauth.plugins.basic` -- HTTP Basic (username / password).
* :mod:`~specauth.plugins.api_key` -- static API key.
* :mod:`~specauth.plugins.oauth2` -- OAuth2 tokens, authorization URL
  construction, and the local authorization-code callback server.
"""
