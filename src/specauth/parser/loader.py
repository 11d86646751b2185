"""Locate and load integration documents.

An integration is an API described by a Swagger 2.0 or OpenAPI 3.x
document, in JSON or YAML, on disk or behind an ``http(s)`` URL. The
public functions are:

* :func:`load_spec` -- load and parse a document from a path or URL.
* :func:`validate_spec_version` -- accept Swagger ``2.0`` and OpenAPI
  ``3.x``, reject everything else.
* :func:`find_integration_source` -- resolve an integration name to a
  document location.
* :func:`load_integration` -- all of the above plus
  :func:`~specauth.parser.extractor.extract_security_definitions`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from specauth.exceptions import IntegrationError
from specauth.models import AppConfig, Integration
from specauth.output import debug
from specauth.parser.extractor import extract_security_definitions

_EXTENSIONS = (".json", ".yaml", ".yml")


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an integration document from a URL or file path.

    Args:
        source: A URL (http/https) or a file path.
        timeout: Request timeout for URLs, in seconds.

    Returns:
        The parsed document as a dictionary.

    Raises:
        IntegrationError: If the source cannot be loaded or parsed.
    """
    if source.startswith(("http://", "https://")):
        return _load_from_url(source, timeout)
    return _load_from_file(source)


def _load_from_url(url: str, timeout: float) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise IntegrationError(
            f"HTTP {exc.response.status_code} fetching integration document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise IntegrationError(f"Failed to fetch integration document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise IntegrationError(f"Integration document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IntegrationError(f"Failed to read integration document {path}: {exc}") from exc

    if not content.strip():
        raise IntegrationError(f"Integration document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless *hint* is ``"yaml"``; a ``"json"`` hint
    disables the YAML fallback.

    Raises:
        IntegrationError: If the content is neither, or is not a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise IntegrationError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        return _require_mapping(result)

    msg = "Failed to parse integration document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise IntegrationError(msg)


def _require_mapping(result: Any) -> dict[str, Any]:  # noqa: ANN401
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise IntegrationError(f"Integration document must be a JSON/YAML object (got {kind})")
    return result


def validate_spec_version(spec: dict[str, Any]) -> str:
    """Return the document's version string.

    Accepts Swagger ``2.0`` (the ``swagger`` field) and OpenAPI ``3.x``
    (the ``openapi`` field).

    Raises:
        IntegrationError: If the version is missing or unsupported.
    """
    if "swagger" in spec:
        swagger_version = str(spec["swagger"])
        if swagger_version == "2.0":
            return swagger_version
        raise IntegrationError(
            f"Unsupported Swagger version: {swagger_version}. Only Swagger 2.0 is supported."
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise IntegrationError(
            "Missing 'swagger' or 'openapi' field. Is this a Swagger 2.0 or OpenAPI 3.x document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str
    raise IntegrationError(
        f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
    )


def find_integration_source(name: str, config: AppConfig) -> Optional[str]:
    """Resolve *name* to the path or URL of its document.

    Looked up in order:

    1. ``config.integrations[name]`` (relative paths are taken from the
       integrations directory);
    2. ``<integrations_dir>/<name>/openapi.{json,yaml,yml}``;
    3. ``<integrations_dir>/<name>.{json,yaml,yml}``.

    Returns:
        The first match, or ``None``.
    """
    configured = config.integrations.get(name)
    if configured:
        if configured.startswith(("http://", "https://")):
            return configured
        path = Path(configured).expanduser()
        if not path.is_absolute():
            path = config.integrations_dir / path
        return str(path)

    candidates = [config.integrations_dir / name / f"openapi{ext}" for ext in _EXTENSIONS]
    candidates += [config.integrations_dir / f"{name}{ext}" for ext in _EXTENSIONS]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_integration(name: str, config: AppConfig) -> Integration:
    """Load the integration called *name*.

    Args:
        name: The integration name used on the command line.
        config: Supplies the integrations directory and overrides.

    Returns:
        The :class:`~specauth.models.Integration` with its supported
        security definitions.

    Raises:
        IntegrationError: If no document is found or it cannot be parsed.
    """
    source = find_integration_source(name, config)
    if source is None:
        raise IntegrationError(
            f"Integration {name} not found in {config.integrations_dir} "
            "and not listed under 'integrations' in specauth.json"
        )

    debug(f"Loading integration {name} from {source}")
    raw = load_spec(source, timeout=config.http_timeout)
    version = validate_spec_version(raw)
    info_section = raw.get("info")
    title = info_section.get("title") if isinstance(info_section, dict) else None
    return Integration(
        name=name,
        source=source,
        title=title,
        security_definitions=extract_security_definitions(raw, version),
    )
