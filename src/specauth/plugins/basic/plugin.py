"""HTTP Basic credential scheme.

Stores ``username`` and ``password`` for security definitions of type
``basic``. The password prompt hides its input.

See Also:
    :class:`specauth.auth.base.CredentialScheme` for the base interface.
"""

from __future__ import annotations

from specauth.auth.base import CredentialScheme
from specauth.models import Question, SecurityType

_QUESTIONS = (
    Question(key="username", prompt="username"),
    Question(key="password", prompt="password", secret=True),
)


class BasicScheme(CredentialScheme):
    """Collect a username and password."""

    @property
    def security_type(self) -> SecurityType:
        return SecurityType.BASIC

    @property
    def questions(self) -> tuple[Question, ...]:
        return _QUESTIONS
