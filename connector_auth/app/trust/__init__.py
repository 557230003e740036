"""
Trusted host package.

Outbound calls only carry the bot's bearer token when the destination
host is in the registry and its trust has not lapsed. Keys:

- Entries are per host; scheme, port and path are ignored.
- Expired entries stay in the map and simply stop being trusted.
- Malformed URLs fail closed and are logged, never raised.
"""

from .registry import TrustedHostRegistry

__all__ = ["TrustedHostRegistry"]
