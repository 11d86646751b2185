"""Credential acquisition and persistence.

The main entry points are:

- :class:`CredentialStore` -- per-integration account files on disk.
- :class:`CredentialScheme` -- question set and merge rules for one
  security type.
- :class:`AuthManager` -- maps each security type to its scheme;
  :func:`create_default_manager` builds one with every built-in scheme.

The interactive pieces live in :mod:`specauth.auth.selector`,
:mod:`specauth.auth.flow` and :mod:`specauth.auth.orchestrator`.

Typical usage::

    from specauth.auth.orchestrator import Authenticator

    Authenticator(config).run("github", alias="work")
"""

from specauth.auth.base import CredentialScheme
from specauth.auth.credential_store import CredentialStore
from specauth.auth.manager import AuthManager, create_default_manager

__all__ = [
    "AuthManager",
    "CredentialScheme",
    "CredentialStore",
    "create_default_manager",
]
