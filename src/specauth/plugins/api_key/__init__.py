"""API key credential scheme.

Exports:
    :class:`APIKeyScheme` -- asks for a single ``api_key``.
"""

from specauth.plugins.api_key.plugin import APIKeyScheme

__all__ = ["APIKeyScheme"]
