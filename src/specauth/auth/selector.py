"""Pick the security definition an authentication run works with."""

from __future__ import annotations

from typing import Optional

from specauth.exceptions import (
    AccountNotFoundError,
    NoSecurityDefinitionsError,
    SecurityDefinitionNotFoundError,
)
from specauth.models import AccountCollection, Choice, Integration, SecurityDefinition
from specauth.output import debug
from specauth.prompts import AnswerCollector

CHOICE_PROMPT = "This API has multiple authentication flows. Which do you want to use?"


def select_security_definition(
    integration: Integration,
    accounts: AccountCollection,
    alias: Optional[str],
    collector: AnswerCollector,
) -> SecurityDefinition:
    """Select the security definition for *integration*.

    Rules, in order:

    1. No definitions at all -> :class:`NoSecurityDefinitionsError`.
    2. *alias* given -> the account must exist and its
       ``securityDefinition`` must be declared by the integration; that
       definition is used without prompting.
    3. Exactly one definition -> used without prompting.
    4. Otherwise the user chooses; options are labelled ``"<type> (<name>)"``.

    Args:
        integration: The loaded integration.
        accounts: Accounts already stored for the integration.
        alias: The account being edited, or ``None`` when creating one.
        collector: Where the choice is asked.

    Raises:
        NoSecurityDefinitionsError: Rule 1.
        AccountNotFoundError: *alias* is not in *accounts*.
        SecurityDefinitionNotFoundError: The account references a
            definition the integration does not declare.
    """
    definitions = integration.security_definitions
    if not definitions:
        raise NoSecurityDefinitionsError(integration.name)

    if alias is not None:
        account = accounts.get(alias)
        if account is None:
            raise AccountNotFoundError(integration.name, alias)
        definition = definitions.get(account.security_definition)
        if definition is None:
            raise SecurityDefinitionNotFoundError(
                integration.name, account.security_definition, alias=alias
            )
        debug(f"Editing {alias} with security definition {definition.name}")
        return definition

    if len(definitions) == 1:
        definition = next(iter(definitions.values()))
        debug(f"Using the only security definition, {definition.name}")
        return definition

    choices = [Choice(label=d.label, value=d) for d in definitions.values()]
    return collector.ask_choice(CHOICE_PROMPT, choices)
