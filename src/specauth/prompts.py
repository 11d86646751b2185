"""Interactive answer collection.

The authentication flows never talk to the terminal directly. They describe
what they need as :class:`~specauth.models.Question` and
:class:`~specauth.models.Choice` objects and hand them to an
:class:`AnswerCollector`. :class:`ConsoleAnswerCollector` is the terminal
implementation used by the CLI; tests substitute a scripted collector.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, Sequence

import typer

from specauth.exceptions import InvalidUsageError
from specauth.models import Choice, Question
from specauth.output import info


class AnswerCollector(ABC):
    """Collects free-form answers and single choices from the user."""

    @abstractmethod
    def ask(self, questions: Sequence[Question]) -> dict[str, str]:
        """Ask each question in order.

        Args:
            questions: Ordered questions. A ``default`` is offered as the
                pre-filled answer; ``secret`` questions hide the input.

        Returns:
            A mapping from each question's ``key`` to the answer string
            (possibly empty).
        """
        ...

    @abstractmethod
    def ask_choice(self, prompt: str, choices: Sequence[Choice]) -> Any:  # noqa: ANN401
        """Ask the user to pick exactly one of *choices*.

        Returns:
            The ``value`` of the selected :class:`~specauth.models.Choice`.
        """
        ...


def _is_interactive() -> bool:
    return hasattr(sys.stdin, "isatty") and sys.stdin.isatty()


class ConsoleAnswerCollector(AnswerCollector):
    """Prompt on the terminal via :func:`typer.prompt`.

    Secret questions hide the typed input and never echo their default.

    Raises:
        InvalidUsageError: From either method when stdin is not a TTY.
    """

    def ask(self, questions: Sequence[Question]) -> dict[str, str]:
        self._require_terminal()
        answers: dict[str, str] = {}
        for question in questions:
            answers[question.key] = typer.prompt(
                question.prompt,
                default=question.default if question.default is not None else "",
                hide_input=question.secret,
                show_default=bool(question.default) and not question.secret,
            )
        return answers

    def ask_choice(self, prompt: str, choices: Sequence[Choice]) -> Any:  # noqa: ANN401
        self._require_terminal()
        info(prompt)
        for i, choice in enumerate(choices, 1):
            info(f"  {i}. {choice.label}")

        raw = typer.prompt("Select number", default="1")
        try:
            idx = int(raw) - 1
        except ValueError:
            raise InvalidUsageError(f"Invalid selection: {raw}") from None
        if idx < 0 or idx >= len(choices):
            raise InvalidUsageError(f"Selection must be between 1 and {len(choices)}.")
        return choices[idx].value

    @staticmethod
    def _require_terminal() -> None:
        if not _is_interactive():
            raise InvalidUsageError(
                "Authentication requires an interactive terminal (stdin must be a TTY)"
            )
