"""specauth -- acquire and persist credentials for API integrations.

An *integration* is an API described by a Swagger 2.0 or OpenAPI 3.x
document that declares one or more security definitions (HTTP Basic, API
key, or OAuth2). ``specauth`` walks the user through the matching
credential questions, or runs a short-lived local callback server that
completes the OAuth2 authorization-code exchange, and stores the resulting
*accounts* in ``./credentials/<integration>.json``.

Typical workflow::

    specauth authenticate github                      # create an account
    specauth authenticate github --as work            # edit the "work" account
    specauth authenticate gmail --as me --generate-token

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: Configuration resolution and XDG data directory.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    prompts: Interactive answer collection.
"""

__version__ = "0.1.0"
