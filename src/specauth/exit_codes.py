"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specauth.exceptions.SpecauthError` subclass.
Shell wrappers can inspect the exit code to tell failure classes apart
without parsing stderr.

Example::

    $ specauth authenticate github --as missing
    $ echo $?
    3   # EXIT_CONFIGURATION_ERROR -- no such account
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or without a usable terminal."""

EXIT_CONFIGURATION_ERROR = 3
"""Security definitions, accounts, or settings are missing or inconsistent."""

EXIT_STORE_ERROR = 4
"""The credential store could not be read or written."""

EXIT_NETWORK_ERROR = 5
"""The callback listener or the token exchange failed at the transport level."""

EXIT_PROVIDER_ERROR = 6
"""The OAuth2 provider rejected the token exchange or answered without tokens."""

EXIT_INTEGRATION_ERROR = 7
"""The integration document could not be found or parsed."""

EXIT_CANCELLED = 130
"""The operator interrupted the command (SIGINT)."""
