"""Abstract base class for credential schemes.

A :class:`CredentialScheme` knows, for one
:class:`~specauth.models.SecurityType`, which questions to ask and how the
answers turn into (or merge into) an :class:`~specauth.models.Account`.
There is one concrete scheme per security type:

- :class:`~specauth.plugins.basic.BasicScheme`
- :class:`~specauth.plugins.api_key.APIKeyScheme`
- :class:`~specauth.plugins.oauth2.OAuth2Scheme`

See Also:
    :mod:`specauth.auth.manager` for the type -> scheme dispatch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from specauth.models import Account, Question, SecurityType


class CredentialScheme(ABC):
    """Question set and merge rules for one security type."""

    @property
    @abstractmethod
    def security_type(self) -> SecurityType:
        """The security type this scheme handles."""
        ...

    @property
    @abstractmethod
    def questions(self) -> tuple[Question, ...]:
        """The questions asked for a new account, in order."""
        ...

    def questions_for(self, account: Optional[Account] = None) -> list[Question]:
        """Return the questions, pre-filled from *account* when editing.

        Args:
            account: The account being edited, or ``None`` for a new one.

        Returns:
            Copies of :attr:`questions` whose ``default`` is the account's
            current value for that field (if any).
        """
        if account is None:
            return list(self.questions)
        current = account.to_record()
        return [
            question.model_copy(update={"default": current.get(question.key)})
            for question in self.questions
        ]

    def prune(self, answers: Mapping[str, str]) -> dict[str, str]:
        """Drop answers this scheme does not know about and every falsy value."""
        keys = {question.key for question in self.questions}
        return {key: value for key, value in answers.items() if key in keys and value}

    def build_account(self, answers: Mapping[str, str], definition_name: str) -> Account:
        """Create a new account from collected answers.

        Args:
            answers: Raw answers keyed by question key.
            definition_name: Name of the selected security definition.

        Returns:
            A sparse :class:`~specauth.models.Account` tagged with
            *definition_name*.
        """
        return Account(security_definition=definition_name, **self.prune(answers))

    def merge(self, account: Account, answers: Mapping[str, str], definition_name: str) -> Account:
        """Merge collected answers into an existing account.

        Non-empty answers overwrite the stored values; blank answers leave
        them as they were. Fields outside this scheme's questions, including
        unknown keys already on disk, are kept.

        Returns:
            A new :class:`~specauth.models.Account`; *account* is not mutated.
        """
        record = account.to_record()
        record.update(self.prune(answers))
        record["securityDefinition"] = definition_name
        return Account.model_validate(record)
