"""HTTP Basic credential scheme.

Exports:
    :class:`BasicScheme` -- asks for a username and a hidden password.
"""

from specauth.plugins.basic.plugin import BasicScheme

__all__ = ["BasicScheme"]
