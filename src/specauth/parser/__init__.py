"""Integration document parser.

Turns an integration name into an :class:`~specauth.models.Integration`
carrying the security definitions its Swagger 2.0 / OpenAPI 3.x document
declares.

Typical usage::

    from specauth.parser import load_integration

    integration = load_integration("github", config)
    integration.security_definitions["oauth2"].token_url

Sub-modules:

* :mod:`~specauth.parser.loader` -- I/O (URL or file), format detection,
  version validation and integration lookup.
* :mod:`~specauth.parser.extractor` -- maps declared schemes to
  :class:`~specauth.models.SecurityDefinition` objects.
"""

from specauth.parser.extractor import extract_security_definitions
from specauth.parser.loader import (
    find_integration_source,
    load_integration,
    load_spec,
    validate_spec_version,
)

__all__ = [
    "extract_security_definitions",
    "find_integration_source",
    "load_integration",
    "load_spec",
    "validate_spec_version",
]
