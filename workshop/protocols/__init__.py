"""
Workshop Protocols.

Defines interfaces for external integrations.
"""

from workshop.protocols.identity import Actor, IdentityProvider, Role

__all__ = [
    "Actor",
    "IdentityProvider",
    "Role",
]
