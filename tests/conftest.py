"""Shared test fixtures for specauth.

Provides reusable fixtures for isolated configuration, integration
documents, output state, scripted answer collection, and CLI invocation.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
import socket
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import pytest

from specauth.models import AppConfig, Choice, Question
from specauth.output import OutputFormat, OutputManager, reset_output, set_output
from specauth.prompts import AnswerCollector


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def find_free_port() -> int:
    """Return a TCP port on 127.0.0.1 that is free right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Raw integration documents
# ---------------------------------------------------------------------------


@pytest.fixture
def swagger_multi_raw() -> dict[str, Any]:
    """Swagger 2.0 document declaring basic, apiKey and oauth2 definitions."""
    with open(FIXTURES_DIR / "swagger_multi.json") as f:
        return json.load(f)


@pytest.fixture
def openapi_schemes_raw() -> dict[str, Any]:
    """OpenAPI 3.0 document with supported and unsupported security schemes."""
    with open(FIXTURES_DIR / "openapi_schemes.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Config isolation fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_DATA_HOME into tmp_path, clears all SPECAUTH_* environment
    variables and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in [
        "SPECAUTH_CREDENTIALS_DIR",
        "SPECAUTH_INTEGRATIONS_DIR",
        "SPECAUTH_OAUTH_PORT",
        "SPECAUTH_OAUTH_TIMEOUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def app_config(isolated_config: Path) -> AppConfig:
    """An AppConfig rooted in the isolated directory, on a free OAuth port."""
    return AppConfig(
        credentials_dir=isolated_config / "credentials",
        integrations_dir=isolated_config / "integrations",
        oauth_port=find_free_port(),
        oauth_timeout=10.0,
    )


@pytest.fixture
def write_integration(app_config: AppConfig) -> Callable[[str, dict[str, Any]], Path]:
    """Return a helper that stores a document as ``<integrations_dir>/<name>.json``."""

    def _write(name: str, document: dict[str, Any]) -> Path:
        app_config.integrations_dir.mkdir(parents=True, exist_ok=True)
        path = app_config.integrations_dir / f"{name}.json"
        path.write_text(json.dumps(document))
        return path

    return _write


def swagger_doc(security_definitions: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """A minimal Swagger 2.0 document with the given securityDefinitions."""
    doc: dict[str, Any] = {
        "swagger": "2.0",
        "info": {"title": "Test API", "version": "1.0"},
        "paths": {},
    }
    if security_definitions is not None:
        doc["securityDefinitions"] = security_definitions
    return doc


# ---------------------------------------------------------------------------
# Answer collection
# ---------------------------------------------------------------------------


class ScriptedCollector(AnswerCollector):
    """AnswerCollector that replays canned answers and records every prompt.

    Args:
        answers: One mapping per :meth:`ask` call, consumed in order.
            Questions missing from a mapping are answered with ``""``.
        choice: Index of the option :meth:`ask_choice` picks.
    """

    def __init__(self, answers: Sequence[dict[str, str]] = (), choice: int = 0) -> None:
        self._answers = list(answers)
        self._choice = choice
        self.asked: list[list[Question]] = []
        self.choices_asked: list[tuple[str, list[Choice]]] = []

    def ask(self, questions: Sequence[Question]) -> dict[str, str]:
        self.asked.append(list(questions))
        script = self._answers.pop(0) if self._answers else {}
        return {q.key: script.get(q.key, "") for q in questions}

    def ask_choice(self, prompt: str, choices: Sequence[Choice]) -> Any:  # noqa: ANN401
        self.choices_asked.append((prompt, list(choices)))
        return choices[self._choice].value

    @property
    def prompt_count(self) -> int:
        return len(self.asked) + len(self.choices_asked)


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Set up a quiet output manager for tests that don't care about output.

    Installs a PLAIN-format, quiet OutputManager as the global output
    and resets it after the test completes.
    """
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def plain_output() -> OutputManager:
    """Set up a PLAIN-format, non-quiet OutputManager."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()


# ---------------------------------------------------------------------------
# Helper fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def free_port() -> int:
    """A TCP port on 127.0.0.1 that is free right now."""
    return find_free_port()


@pytest.fixture
def make_collector() -> Callable[..., ScriptedCollector]:
    """Factory for :class:`ScriptedCollector` instances."""
    return ScriptedCollector


@pytest.fixture
def make_swagger() -> Callable[..., dict[str, Any]]:
    """Factory for minimal Swagger 2.0 documents."""
    return swagger_doc
