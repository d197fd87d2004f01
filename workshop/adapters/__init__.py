"""
Workshop Adapters.

Implementations of protocols for external systems. The identity provider
in use is loaded from settings by workshop.conf.get_identity_backend().
"""

from workshop.adapters.identity import WorkerIdentityProvider

__all__ = [
    "WorkerIdentityProvider",
]
