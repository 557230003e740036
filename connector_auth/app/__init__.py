"""
Connector auth application package.

- app.trust: TrustedHostRegistry deciding where tokens may be sent.
- app.credentials: MicrosoftAppCredentials and token acquisition.
- app.validation: Government channel token validation.
- app.constants: Well-known endpoints, scopes and claim names.

Design notes:
- Importing this package performs no IO; network calls happen only when
  a token is requested or a channel token is validated.
- Use the shared/ utilities for logging, config and errors.
"""
