"""
Connector authentication for bots talking to Bot Framework channels.

- app.trust: Trusted destination hosts for outbound bearer tokens.
- app.credentials: Application credentials and token acquisition.
- app.validation: Inbound channel token validation.
"""
