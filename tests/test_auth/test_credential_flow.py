"""Tests for interactive account creation and editing."""

from __future__ import annotations

import json
from typing import Any, Callable

import pytest

from specauth.auth.credential_store import CredentialStore
from specauth.auth.flow import ALIAS_QUESTION, CredentialFlow
from specauth.auth.manager import create_default_manager
from specauth.exceptions import AccountNotFoundError, InvalidUsageError
from specauth.models import Account, AppConfig, SecurityDefinition, SecurityType


BASIC = SecurityDefinition(name="basic_auth", type=SecurityType.BASIC)
KEY = SecurityDefinition(name="api_key", type=SecurityType.API_KEY)
OAUTH = SecurityDefinition(
    name="oauth2",
    type=SecurityType.OAUTH2,
    flow="accessCode",
    authorization_url="https://auth.example.com/authorize",
    token_url="https://auth.example.com/token",
    scopes={"read": "", "write": ""},
)


@pytest.fixture()
def store(app_config: AppConfig) -> CredentialStore:
    return CredentialStore(app_config.credentials_dir)


def _flow(store: CredentialStore, collector: Any, app_config: AppConfig) -> CredentialFlow:
    return CredentialFlow(store, collector, create_default_manager(), app_config)


def _on_disk(store: CredentialStore, name: str = "github") -> dict[str, Any]:
    return json.loads(store.path_for(name).read_text())


class TestCreateAccount:
    def test_basic_account(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        collector = make_collector([{"username": "octo", "password": "pw"}, {"alias": "work"}])

        alias = _flow(store, collector, app_config).run("github", BASIC, {})

        assert alias == "work"
        assert _on_disk(store) == {
            "work": {"securityDefinition": "basic_auth", "username": "octo", "password": "pw"}
        }
        assert collector.asked[1] == [ALIAS_QUESTION]

    def test_falsy_answers_absent(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        collector = make_collector([{"access_token": "A"}, {"alias": "me"}])

        _flow(store, collector, app_config).run("github", OAUTH, {})

        assert _on_disk(store) == {"me": {"securityDefinition": "oauth2", "access_token": "A"}}

    def test_two_aliases_in_separate_runs(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        first = make_collector([{"api_key": "k1"}, {"alias": "one"}])
        _flow(store, first, app_config).run("github", KEY, store.load("github"))

        second = make_collector([{"api_key": "k2"}, {"alias": "two"}])
        _flow(store, second, app_config).run("github", KEY, store.load("github"))

        accounts = store.load("github")
        assert set(accounts) == {"one", "two"}
        assert accounts["one"].api_key == "k1"
        assert accounts["two"].api_key == "k2"

    def test_existing_alias_is_overwritten(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        accounts = {"work": Account(security_definition="api_key", api_key="old")}
        collector = make_collector([{"api_key": "new"}, {"alias": "work"}])

        _flow(store, collector, app_config).run("github", KEY, accounts)

        assert _on_disk(store) == {"work": {"securityDefinition": "api_key", "api_key": "new"}}

    def test_alias_is_stripped(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        collector = make_collector([{"api_key": "k"}, {"alias": "  work "}])
        assert _flow(store, collector, app_config).run("github", KEY, {}) == "work"

    def test_empty_alias_rejected(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        collector = make_collector([{"api_key": "k"}, {"alias": ""}])
        with pytest.raises(InvalidUsageError, match="alias"):
            _flow(store, collector, app_config).run("github", KEY, {})
        assert not store.path_for("github").exists()

    def test_new_account_questions_have_no_defaults(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        collector = make_collector([{"api_key": "k"}, {"alias": "a"}])
        _flow(store, collector, app_config).run("github", KEY, {})
        assert collector.asked[0][0].default is None


class TestEditAccount:
    def test_defaults_from_account_and_merge(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        accounts = {
            "work": Account(security_definition="basic_auth", username="octo", password="old"),
            "other": Account(security_definition="api_key", api_key="k"),
        }
        collector = make_collector([{"username": "", "password": "new"}])

        alias = _flow(store, collector, app_config).run("github", BASIC, accounts, alias="work")

        assert alias == "work"
        assert [q.default for q in collector.asked[0]] == ["octo", "old"]
        assert len(collector.asked) == 1
        assert _on_disk(store) == {
            "work": {"securityDefinition": "basic_auth", "username": "octo", "password": "new"},
            "other": {"securityDefinition": "api_key", "api_key": "k"},
        }

    def test_oauth2_edit_prints_authorization_url(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        plain_output: object,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        accounts = {
            "work": Account(security_definition="oauth2", access_token="A", client_id="cid")
        }
        collector = make_collector([{}])

        _flow(store, collector, app_config).run("github", OAUTH, accounts, alias="work")

        captured = capsys.readouterr()
        assert "You can retrieve an access token here:" in captured.err
        assert captured.out.startswith("https://auth.example.com/authorize?response_type=code")
        assert "client_id=cid" in captured.out
        assert "scope=read&" in captured.out

    def test_oauth2_create_prints_no_url(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        plain_output: object,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        collector = make_collector([{"access_token": "A"}, {"alias": "me"}])
        _flow(store, collector, app_config).run("github", OAUTH, {})
        assert capsys.readouterr().out == ""

    def test_secrets_never_printed(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        plain_output: object,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        collector = make_collector([{"username": "octo", "password": "s3cret-pw"}, {"alias": "me"}])
        _flow(store, collector, app_config).run("github", BASIC, {})
        captured = capsys.readouterr()
        assert "s3cret-pw" not in captured.out + captured.err

    def test_unknown_alias(
        self,
        store: CredentialStore,
        app_config: AppConfig,
        make_collector: Callable[..., Any],
        quiet_output: object,
    ) -> None:
        collector = make_collector()
        with pytest.raises(AccountNotFoundError):
            _flow(store, collector, app_config).run("github", BASIC, {}, alias="ghost")
        assert collector.prompt_count == 0
