"""Persistent per-integration account store.

Accounts for an integration live in ``<credentials_dir>/<integration>.json``
as one pretty-printed JSON object mapping alias -> account record::

    {
      "work": {
        "access_token": "...",
        "client_id": "...",
        "securityDefinition": "oauth2"
      }
    }

The caller loads the collection, mutates that same mapping, and hands it
back to :meth:`CredentialStore.save`, which writes it verbatim. There is no
file locking: two invocations editing the same integration at once can race
and the last writer wins.

Files are written atomically (temp file + ``os.replace``) with ``0o600``
permissions so secrets are never world-readable, even momentarily.

See Also:
    :class:`~specauth.auth.flow.CredentialFlow` and
    :class:`~specauth.plugins.oauth2.server.OAuthCallbackServer`, the two
    writers.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from specauth.config import atomic_write
from specauth.exceptions import MalformedStoreError, StoreWriteError
from specauth.models import Account, AccountCollection
from specauth.output import debug, info


class CredentialStore:
    """Read and write account collections under one credentials directory.

    Args:
        credentials_dir: Directory holding one ``<integration>.json`` file
            per integration. Created on demand.

    Example::

        store = CredentialStore(Path("credentials"))
        accounts = store.load("github")
        accounts["me"] = Account(security_definition="basic", username="octo")
        store.save("github", accounts)
    """

    def __init__(self, credentials_dir: Path) -> None:
        self._dir = Path(credentials_dir)

    @property
    def directory(self) -> Path:
        """The credentials directory."""
        return self._dir

    def path_for(self, integration_name: str) -> Path:
        """The credential file for *integration_name*."""
        return self._dir / f"{integration_name}.json"

    def ensure_directory(self) -> None:
        """Create the credentials directory if it does not exist yet.

        Raises:
            StoreWriteError: If the directory cannot be created for any
                reason other than already existing.
        """
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreWriteError(
                f"Cannot create credentials directory {self._dir}: {exc.strerror or exc}"
            ) from exc

    def load(self, integration_name: str) -> AccountCollection:
        """Load every stored account for *integration_name*.

        Returns:
            A mapping of alias to :class:`~specauth.models.Account`; empty
            when the integration has no credential file yet.

        Raises:
            MalformedStoreError: If the file exists but is not a JSON object
                of account records.
        """
        path = self.path_for(integration_name)
        if not path.is_file():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedStoreError(f"Credential file {path} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise MalformedStoreError(f"Cannot read credential file {path}: {exc.strerror or exc}") from exc

        if not isinstance(data, dict):
            raise MalformedStoreError(f"Credential file {path} must contain a JSON object")

        accounts: AccountCollection = {}
        for alias, record in data.items():
            try:
                accounts[alias] = Account.model_validate(record)
            except ValidationError as exc:
                raise MalformedStoreError(
                    f"Account {alias} in {path} is malformed "
                    f"({exc.error_count()} validation error(s))"
                ) from exc
        debug(f"Loaded {len(accounts)} account(s) from {path}")
        return accounts

    def save(self, integration_name: str, accounts: AccountCollection) -> Path:
        """Persist *accounts* as the complete collection for *integration_name*.

        Args:
            integration_name: Integration the accounts belong to.
            accounts: The collection previously returned by :meth:`load`,
                after the caller's in-place changes.

        Returns:
            The path that was written.

        Raises:
            StoreWriteError: If the directory or the file cannot be written.
        """
        self.ensure_directory()
        path = self.path_for(integration_name)
        document = {alias: account.to_record() for alias, account in accounts.items()}
        text = json.dumps(document, indent=2) + "\n"

        info(f"Saving credentials to {_display_path(path)}")
        try:
            atomic_write(path, text, mode=0o600)
        except OSError as exc:
            raise StoreWriteError(f"Cannot write credential file {path}: {exc.strerror or exc}") from exc
        return path


def _display_path(path: Path) -> str:
    """Show *path* relative to the working directory when it lives below it."""
    try:
        return f"./{path.relative_to(Path.cwd())}"
    except ValueError:
        return str(path)
