"""Canonical Pydantic models shared across all specauth modules.

The models fall into three groups:

**Integration models** -- produced by :mod:`specauth.parser` from an
integration's Swagger/OpenAPI document and never mutated afterwards:
    :class:`SecurityType`, :class:`SecurityDefinition`, :class:`Integration`.

**Credential models** -- persisted by
:class:`~specauth.auth.credential_store.CredentialStore`:
    :class:`Account` and the :data:`AccountCollection` alias.

**Runtime models** -- configuration and ephemeral state:
    :class:`AppConfig`, :class:`Question`, :class:`Choice`,
    :class:`OAuthExchangeState`.

All models use Pydantic v2. Fields whose on-disk or on-the-wire name is
camelCase (``securityDefinition``, ``authorizationUrl``, ``tokenUrl``) are
declared with an alias and ``populate_by_name`` so Python code can use
snake_case.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Integration models ---


class SecurityType(str, enum.Enum):
    """Authentication schemes an integration can declare.

    This is a closed set: documents declaring anything else are filtered out
    by the parser before a :class:`SecurityDefinition` is built.
    """

    BASIC = "basic"
    API_KEY = "apiKey"
    OAUTH2 = "oauth2"


class SecurityDefinition(BaseModel):
    """A named authentication scheme declared by an integration.

    Mirrors a Swagger 2.0 *Security Scheme Object*. OpenAPI 3.x schemes are
    normalised into this shape by
    :func:`~specauth.parser.extractor.extract_security_definitions`.

    Instances are frozen; provider-specific adjustments produce a copy via
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: SecurityType
    flow: Optional[str] = None
    authorization_url: Optional[str] = Field(default=None, alias="authorizationUrl")
    token_url: Optional[str] = Field(default=None, alias="tokenUrl")
    scopes: dict[str, str] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        """Label shown when the user has to pick between definitions."""
        return f"{self.type.value} ({self.name})"


class Integration(BaseModel):
    """An API integration and the security definitions it declares."""

    name: str
    source: str = Field(description="Path or URL of the integration document")
    title: Optional[str] = None
    security_definitions: dict[str, SecurityDefinition] = Field(default_factory=dict)


# --- Credential models ---


class Account(BaseModel):
    """A persisted credential record for one integration.

    Which fields are populated depends on the referenced security
    definition's type:

    * ``basic`` -- ``username``, ``password``
    * ``apiKey`` -- ``api_key``
    * ``oauth2`` -- ``access_token`` and optionally ``refresh_token``,
      ``client_id``, ``client_secret``

    Records are sparse: unset fields are omitted on disk rather than written
    as ``null``. Unknown keys already present in the file are kept in
    ``model_extra`` and written back untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    security_definition: str = Field(alias="securityDefinition")
    username: Optional[str] = None
    password: Optional[str] = None
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None

    def to_record(self) -> dict[str, Any]:
        """Serialise to the sparse on-disk JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def field_names(self) -> list[str]:
        """Names of the populated credential fields, excluding the definition tag."""
        return [key for key in self.to_record() if key != "securityDefinition"]


AccountCollection = dict[str, Account]
"""Mapping from user-chosen alias to :class:`Account`, one per integration."""


# --- Runtime models ---


class AppConfig(BaseModel):
    """Effective configuration for one invocation.

    Built by :func:`~specauth.config.resolve_config` and passed explicitly to
    every component that needs a path, port, or timeout.
    """

    credentials_dir: Path = Field(description="Directory holding <integration>.json files")
    integrations_dir: Path = Field(description="Directory searched for integration documents")
    integrations: dict[str, str] = Field(
        default_factory=dict,
        description="Explicit integration name -> document path or URL",
    )
    oauth_host: str = Field(default="127.0.0.1", description="Interface the callback server binds")
    oauth_port: int = Field(default=3333, description="Port of the OAuth2 callback server")
    oauth_timeout: float = Field(
        default=300.0, description="Seconds to wait for the provider redirect"
    )
    http_timeout: float = Field(default=30.0, description="Token exchange timeout in seconds")

    @property
    def redirect_uri(self) -> str:
        """The callback URL registered with OAuth2 providers."""
        return f"http://localhost:{self.oauth_port}"


class Question(BaseModel):
    """One free-form question put to the user by an answer collector."""

    key: str
    prompt: str
    secret: bool = False
    default: Optional[str] = None


class Choice(BaseModel):
    """One option in a single-choice prompt."""

    label: str
    value: Any = None


class OAuthExchangeState(BaseModel):
    """State of a single authorization-code exchange.

    Lives only for the duration of one callback server run and is never
    persisted.
    """

    redirect_state: str
    redirect_uri: str
    client_id: str
    client_secret: str
    token_url: str
