"""
Role checks for workshop operations.

actor=None means a trusted in-process caller (shell, management command,
signal receiver) and is always allowed. The API layer always passes an actor.
"""

import logging

from workshop.exceptions import AuthorizationError
from workshop.protocols.identity import Actor

logger = logging.getLogger(__name__)


def actor_label(actor: Actor | None) -> str:
    """Audit label for ledger entries and orders."""
    return actor.label if actor is not None else "system"


def require_admin(actor: Actor | None, action: str) -> None:
    """Only admins may edit the catalog, adjust stock, issue or cancel orders."""
    if actor is None or actor.is_admin:
        return
    logger.warning(
        f"Refused {action} for {actor.label}",
        extra={"action": action, "actor": actor.label, "role": actor.role},
    )
    raise AuthorizationError(action=action, role=actor.role)


def require_assignee_or_admin(actor: Actor | None, work_order, action: str) -> None:
    """Non-admins may only settle orders assigned to them."""
    if actor is None or actor.is_admin:
        return
    if actor.actor_id is not None and actor.actor_id == work_order.assigned_to_id:
        return
    logger.warning(
        f"Refused {action} on {work_order.code} for {actor.label}",
        extra={
            "action": action,
            "actor": actor.label,
            "work_order": work_order.code,
        },
    )
    raise AuthorizationError(action=action, role=actor.role, order=work_order.code)
