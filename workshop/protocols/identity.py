"""
Identity Protocol -- interface for the current actor's identity and role.

Workshop does not authenticate anyone. An external identity provider turns
the authenticated request user into an Actor; the workshop only authorizes
actions based on the actor's role.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from django.db import models
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    """Actor roles."""

    ADMIN = "admin", _("Admin")
    FACTORY = "factory", _("Factory")
    DELIVERY = "delivery", _("Delivery")


@dataclass(frozen=True)
class Actor:
    """
    Who is performing an operation.

    actor_id is the Worker primary key when the actor is a worker,
    None for administrators without a worker record.
    """

    actor_id: int | None
    role: str
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def label(self) -> str:
        """Audit label stored on ledger entries and orders."""
        if self.actor_id is not None:
            return f"worker:{self.actor_id}"
        return f"{self.role}:{self.name}" if self.name else self.role


@runtime_checkable
class IdentityProvider(Protocol):
    """
    Protocol for resolving actors.

    Implementations receive whatever the transport layer authenticated
    (typically request.user) and return an Actor, or None when the user
    has no role in the workshop.
    """

    def actor_for(self, user) -> Actor | None:
        """
        Return the Actor for an authenticated user.

        Args:
            user: The authenticated user instance

        Returns:
            Actor with id and role, or None
        """
        ...
