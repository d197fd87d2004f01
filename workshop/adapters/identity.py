"""
Worker Identity Adapter -- maps Django users to workshop actors.

Default IdentityProvider. Superusers and staff act as admins; everyone else
acts with the role of the Worker linked to their user account.

Settings:
    WORKSHOP = {
        "IDENTITY_BACKEND": "workshop.adapters.identity.WorkerIdentityProvider",
    }
"""

from __future__ import annotations

import logging

from workshop.protocols.identity import Actor, Role

logger = logging.getLogger(__name__)


class WorkerIdentityProvider:
    """IdentityProvider backed by the Worker model."""

    def actor_for(self, user) -> Actor | None:
        if user is None or not getattr(user, "is_authenticated", False):
            return None

        from workshop.models import Worker

        worker = Worker.objects.filter(user=user, is_active=True).first()

        if user.is_superuser or user.is_staff:
            return Actor(
                actor_id=worker.pk if worker else None,
                role=Role.ADMIN,
                name=worker.name if worker else user.get_username(),
            )

        if worker is None:
            logger.debug(f"User {user.get_username()} has no active worker record")
            return None

        return Actor(actor_id=worker.pk, role=worker.role, name=worker.name)
