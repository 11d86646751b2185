"""One-shot local HTTP listener that redeems an OAuth2 authorization code.

:class:`OAuthCallbackServer` is a small state machine::

    LISTENING --(bare request)-----------------------------> CLOSED
    LISTENING --(redirect with query)--> REDEEMING --------> CLOSED

While ``LISTENING`` it serves requests on ``config.oauth_host`` /
``config.oauth_port`` one at a time. The first request that carries no
query string gets the static landing page; the first one that does is
treated as the provider's redirect. Its ``code`` is exchanged at the
token endpoint, the account is updated and saved, and only then is the
browser redirected to ``/#access_token=...&refresh_token=...&saved=true``.
Either way the listener is then torn down. Any exception that escapes a
request closes the listener and is raised from :meth:`OAuthCallbackServer.run`.

Connections that close without sending a request line do not count, and
one that stays idle is dropped after at most :data:`CONNECTION_TIMEOUT`
seconds.
No redirect within ``config.oauth_timeout`` seconds raises
:class:`~specauth.exceptions.OAuthTimeoutError`.

The ``state`` nonce is sent with the authorization URL but not checked on
the way back; a mismatch is only reported with ``--verbose``.
"""

from __future__ import annotations

import enum
import sys
import time
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any, Optional
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

from specauth.auth.credential_store import CredentialStore
from specauth.exceptions import (
    AccountNotFoundError,
    ConfigurationError,
    NetworkError,
    OAuthTimeoutError,
    ProviderError,
    SpecauthError,
)
from specauth.models import (
    Account,
    AccountCollection,
    AppConfig,
    OAuthExchangeState,
    SecurityDefinition,
)
from specauth.output import debug, info, print_url, success, warning
from specauth.plugins.oauth2.plugin import (
    apply_provider_fixups,
    build_authorization_url,
    generate_state,
)

LANDING_PAGE = Path(__file__).resolve().parents[2] / "www" / "oauth_callback.html"

# Upper bound, in seconds, on how long one accepted connection may stay idle.
CONNECTION_TIMEOUT = 5.0

_ERROR_PAGE = (
    "<html><body><h2>Token exchange failed.</h2>"
    "<p>Return to the terminal for details.</p></body></html>"
)


class ServerState(str, enum.Enum):
    """Lifecycle of an :class:`OAuthCallbackServer`."""

    LISTENING = "listening"
    REDEEMING = "redeeming"
    CLOSED = "closed"


class _CallbackHTTPServer(HTTPServer):
    """:class:`HTTPServer` that knows which :class:`OAuthCallbackServer` it serves."""

    def __init__(self, address: tuple[str, int], owner: OAuthCallbackServer) -> None:
        self.owner = owner
        super().__init__(address, _CallbackHandler)

    def handle_error(self, request: Any, client_address: Any) -> None:
        # Replaces socketserver's traceback printout.
        self.owner._record_failure(sys.exc_info()[1])


class _CallbackHandler(BaseHTTPRequestHandler):
    server: _CallbackHTTPServer

    def setup(self) -> None:
        # Read by StreamRequestHandler.setup() as the socket timeout.
        self.timeout = self.server.owner._connection_timeout()
        super().setup()

    def do_GET(self) -> None:
        self.server.owner._handle(self)

    def log_message(self, format: str, *args: Any) -> None:
        # Suppress default logging
        pass


class OAuthCallbackServer:
    """Redeem an authorization code for an existing account.

    Args:
        config: Resolved configuration (host, port, timeouts).
        store: Store the updated collection is saved through.
        integration_name: Integration the account belongs to.
        definition: The account's ``oauth2`` security definition.
        accounts: The collection loaded from *store*; updated in place.
        alias: The account to refresh. It must already carry
            ``client_id`` and ``client_secret``.

    Raises:
        AccountNotFoundError: If *alias* is not in *accounts*.
        ConfigurationError: If the account lacks client credentials or the
            definition lacks an authorization or token endpoint.
    """

    def __init__(
        self,
        config: AppConfig,
        store: CredentialStore,
        integration_name: str,
        definition: SecurityDefinition,
        accounts: AccountCollection,
        alias: str,
    ) -> None:
        account = accounts.get(alias)
        if account is None:
            raise AccountNotFoundError(integration_name, alias)
        if not account.client_id or not account.client_secret:
            raise ConfigurationError(
                f"Account {alias} for {integration_name} needs client_id and client_secret "
                "on file before a token can be generated"
            )

        definition = apply_provider_fixups(integration_name, definition)
        if not definition.authorization_url or not definition.token_url:
            raise ConfigurationError(
                f"Security definition {definition.name} of {integration_name} "
                "must declare both authorizationUrl and tokenUrl"
            )

        self._config = config
        self._store = store
        self._integration_name = integration_name
        self._definition = definition
        self._accounts = accounts
        self._alias = alias
        self._exchange = OAuthExchangeState(
            redirect_state=generate_state(),
            redirect_uri=config.redirect_uri,
            client_id=account.client_id,
            client_secret=account.client_secret,
            token_url=definition.token_url,
        )
        self._state = ServerState.LISTENING
        self._failure: Optional[SpecauthError] = None
        self._redeemed = False
        self._deadline = 0.0

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def definition(self) -> SecurityDefinition:
        """The security definition after provider fixups."""
        return self._definition

    @property
    def authorization_url(self) -> str:
        return build_authorization_url(
            self._definition,
            self._exchange.client_id,
            self._exchange.redirect_uri,
            state=self._exchange.redirect_state,
        )

    def run(self) -> Optional[Account]:
        """Print the authorization URL and serve until the listener closes.

        Returns:
            The updated account after a successful redemption, or ``None``
            when the listener closed on a bare request.

        Raises:
            NetworkError: If the port cannot be bound or the listener fails.
            OAuthTimeoutError: If nothing arrives within the timeout.
            ProviderError: If the token endpoint rejects the exchange.
            StoreError: If the refreshed account cannot be saved.
            SpecauthError: If handling the redirect fails in any other way.
        """
        host, port = self._config.oauth_host, self._config.oauth_port
        try:
            httpd = _CallbackHTTPServer((host, port), self)
        except OSError as exc:
            raise NetworkError(
                f"Cannot listen on {host}:{port}: {exc.strerror or exc}"
            ) from exc

        info("Visit this url to retrieve your access and refresh tokens:")
        print_url(self.authorization_url)
        debug(f"Waiting for the OAuth2 redirect on {self._exchange.redirect_uri}")

        self._deadline = time.monotonic() + self._config.oauth_timeout
        try:
            while self._state == ServerState.LISTENING:
                remaining = self._deadline - time.monotonic()
                if remaining <= 0:
                    raise OAuthTimeoutError(
                        f"No OAuth2 redirect received for {self._alias} on {self._integration_name} "
                        f"within {self._config.oauth_timeout:g} seconds"
                    )
                httpd.timeout = remaining
                try:
                    httpd.handle_request()
                except OSError as exc:
                    raise NetworkError(f"OAuth2 listener failed: {exc.strerror or exc}") from exc
        finally:
            httpd.server_close()
            self._state = ServerState.CLOSED

        if self._failure is not None:
            raise self._failure
        return self._accounts.get(self._alias) if self._redeemed else None

    # ------------------------------------------------------------------ #
    # Request handling
    # ------------------------------------------------------------------ #

    def _handle(self, request: BaseHTTPRequestHandler) -> None:
        query = urlparse(request.path).query
        if not query:
            self._serve_landing_page(request)
            return

        self._state = ServerState.REDEEMING
        try:
            tokens = self._redeem(parse_qs(query))
            self._save_tokens(tokens)
        except SpecauthError as exc:
            self._failure = exc
            self._state = ServerState.CLOSED
            _respond(request, 502, _ERROR_PAGE)
            return

        fragment = urlencode(
            {
                "access_token": tokens["access_token"],
                "refresh_token": tokens.get("refresh_token") or "",
                "saved": "true",
            }
        )
        request.send_response(302)
        request.send_header("Location", f"/#{fragment}")
        request.send_header("Content-Length", "0")
        request.end_headers()
        self._state = ServerState.CLOSED

    def _record_failure(self, exc: Optional[BaseException]) -> None:
        """Close the listener after an exception escaped request handling."""
        self._state = ServerState.CLOSED
        if self._redeemed:
            warning(f"Tokens for {self._alias} were saved but the browser did not get the redirect")
            return
        if self._failure is not None:
            debug(f"Could not deliver the error page: {exc}")
            return
        if isinstance(exc, SpecauthError):
            failure = exc
        elif isinstance(exc, OSError):
            failure = NetworkError(f"OAuth2 callback connection failed: {exc.strerror or exc}")
        else:
            failure = SpecauthError(
                f"OAuth2 callback for {self._alias} on {self._integration_name} failed: {exc}"
            )
        if failure is not exc:
            failure.__cause__ = exc
        self._failure = failure

    def _connection_timeout(self) -> float:
        remaining = self._deadline - time.monotonic()
        return max(0.1, min(CONNECTION_TIMEOUT, remaining))

    def _serve_landing_page(self, request: BaseHTTPRequestHandler) -> None:
        try:
            body = LANDING_PAGE.read_text(encoding="utf-8")
        except OSError as exc:
            self._failure = SpecauthError(
                f"Cannot read callback page {LANDING_PAGE}: {exc.strerror or exc}"
            )
            self._state = ServerState.CLOSED
            request.send_error(500)
            return
        _respond(request, 200, body)
        debug("Served the callback landing page without a token exchange")
        self._state = ServerState.CLOSED

    def _redeem(self, params: dict[str, list[str]]) -> dict[str, Any]:
        if "error" in params:
            raise ProviderError(
                f"Authorization for {self._alias} on {self._integration_name} was refused: "
                f"{params['error'][0]}"
            )
        code = params.get("code", [""])[0]
        if not code:
            raise ProviderError(
                f"OAuth2 redirect for {self._alias} on {self._integration_name} "
                "did not include an authorization code"
            )
        returned_state = params.get("state", [None])[0]
        if returned_state != self._exchange.redirect_state:
            debug("OAuth2 redirect state does not match the one sent (not verified)")
        return self._exchange_code(code)

    def _exchange_code(self, code: str) -> dict[str, Any]:
        """Exchange *code* at the token endpoint.

        Raises:
            ProviderError: On a non-2xx status, a non-JSON body, or a body
                without a string ``access_token``.
            NetworkError: On a transport failure.
        """
        data = {
            "code": code,
            "client_id": self._exchange.client_id,
            "client_secret": self._exchange.client_secret,
            "redirect_uri": self._exchange.redirect_uri,
            "grant_type": "authorization_code",
        }
        debug(f"Exchanging authorization code at {self._exchange.token_url}")
        try:
            response = httpx.post(
                self._exchange.token_url,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self._config.http_timeout,
            )
            response.raise_for_status()
            token_data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                f"Token exchange for {self._alias} on {self._integration_name} failed with "
                f"status {exc.response.status_code}{_describe_provider_error(exc.response)}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"Token exchange for {self._alias} on {self._integration_name} failed: {exc}"
            ) from exc
        except ValueError as exc:
            raise ProviderError(
                f"Token endpoint for {self._integration_name} did not return JSON"
            ) from exc

        if not isinstance(token_data, dict) or not token_data.get("access_token"):
            raise ProviderError(
                f"Token response for {self._integration_name} is missing 'access_token'"
            )
        for key in ("access_token", "refresh_token"):
            value = token_data.get(key)
            if value is not None and not isinstance(value, str):
                raise ProviderError(
                    f"Token response for {self._integration_name} has a non-string '{key}'"
                )
        return token_data

    def _save_tokens(self, tokens: dict[str, Any]) -> None:
        record = self._accounts[self._alias].to_record()
        record["access_token"] = tokens["access_token"]
        if tokens.get("refresh_token"):
            record["refresh_token"] = tokens["refresh_token"]
        self._accounts[self._alias] = Account.model_validate(record)
        self._store.save(self._integration_name, self._accounts)
        self._redeemed = True
        success(f"Saved new tokens for {self._alias}")


def _respond(request: BaseHTTPRequestHandler, status: int, body: str) -> None:
    payload = body.encode("utf-8")
    request.send_response(status)
    request.send_header("Content-Type", "text/html; charset=utf-8")
    request.send_header("Content-Length", str(len(payload)))
    request.end_headers()
    request.wfile.write(payload)


def _describe_provider_error(response: httpx.Response) -> str:
    """Return ``": error (description)"`` from an OAuth2 error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if not isinstance(body, dict) or not body.get("error"):
        return ""
    described = f": {body['error']}"
    if body.get("error_description"):
        described += f" ({body['error_description']})"
    return described
