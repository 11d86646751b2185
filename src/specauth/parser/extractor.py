"""Extract security definitions from Swagger 2.0 and OpenAPI 3.x documents.

Swagger 2.0 declares them under ``securityDefinitions`` with the same
shape :class:`~specauth.models.SecurityDefinition` uses. OpenAPI 3.x
declares ``components/securitySchemes``, which are mapped as follows:

* ``http`` with ``scheme: basic`` -> ``basic``
* ``apiKey`` -> ``apiKey``
* ``oauth2`` -> ``oauth2``, using the ``authorizationCode`` flow when
  declared and the first declared flow otherwise. Flow names are
  translated to their Swagger 2.0 equivalents (``accessCode``,
  ``implicit``, ``password``, ``application``).

Anything else (bearer tokens, ``openIdConnect``, unknown types) is skipped
with a debug message.
"""

from __future__ import annotations

from typing import Any, Optional

from specauth.models import SecurityDefinition, SecurityType
from specauth.output import debug

# OpenAPI 3.x flow name -> Swagger 2.0 flow name
_FLOW_NAMES = {
    "authorizationCode": "accessCode",
    "implicit": "implicit",
    "password": "password",
    "clientCredentials": "application",
}


def extract_security_definitions(
    raw_spec: dict[str, Any], spec_version: str
) -> dict[str, SecurityDefinition]:
    """Return the supported security definitions declared by *raw_spec*.

    Args:
        raw_spec: The parsed document.
        spec_version: The version returned by
            :func:`~specauth.parser.loader.validate_spec_version`.

    Returns:
        A dict mapping definition name to
        :class:`~specauth.models.SecurityDefinition`, in declaration order.
        Empty when nothing usable is declared.
    """
    if spec_version.startswith("2."):
        declared = raw_spec.get("securityDefinitions")
        convert = _from_swagger
    else:
        components = raw_spec.get("components")
        declared = components.get("securitySchemes") if isinstance(components, dict) else None
        convert = _from_openapi

    if not isinstance(declared, dict):
        return {}

    definitions: dict[str, SecurityDefinition] = {}
    for name, data in declared.items():
        if not isinstance(data, dict):
            continue
        definition = convert(str(name), data)
        if definition is None:
            debug(f"Skipping unsupported security definition {name} (type {data.get('type')!r})")
            continue
        definitions[definition.name] = definition
    return definitions


def _from_swagger(name: str, data: dict[str, Any]) -> Optional[SecurityDefinition]:
    security_type = _security_type(data.get("type"))
    if security_type is None:
        return None
    return SecurityDefinition(
        name=name,
        type=security_type,
        flow=data.get("flow"),
        authorization_url=data.get("authorizationUrl"),
        token_url=data.get("tokenUrl"),
        scopes=_scopes(data.get("scopes")),
    )


def _from_openapi(name: str, data: dict[str, Any]) -> Optional[SecurityDefinition]:
    scheme_type = data.get("type")
    if scheme_type == "http":
        if str(data.get("scheme", "")).lower() != "basic":
            return None
        return SecurityDefinition(name=name, type=SecurityType.BASIC)
    if scheme_type == "apiKey":
        return SecurityDefinition(name=name, type=SecurityType.API_KEY)
    if scheme_type != "oauth2":
        return None

    flows = data.get("flows")
    if not isinstance(flows, dict) or not flows:
        return SecurityDefinition(name=name, type=SecurityType.OAUTH2)

    flow_name = "authorizationCode" if "authorizationCode" in flows else next(iter(flows))
    flow = flows[flow_name] if isinstance(flows[flow_name], dict) else {}
    return SecurityDefinition(
        name=name,
        type=SecurityType.OAUTH2,
        flow=_FLOW_NAMES.get(flow_name, flow_name),
        authorization_url=flow.get("authorizationUrl"),
        token_url=flow.get("tokenUrl"),
        scopes=_scopes(flow.get("scopes")),
    )


def _security_type(value: Any) -> Optional[SecurityType]:  # noqa: ANN401
    try:
        return SecurityType(value)
    except ValueError:
        return None


def _scopes(value: Any) -> dict[str, str]:  # noqa: ANN401
    if not isinstance(value, dict):
        return {}
    return {
        str(scope): "" if description is None else str(description)
        for scope, description in value.items()
    }
