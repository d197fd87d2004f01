"""
Workshop Signal Handlers.

Logging receivers for the workshop signals.

This module is imported in apps.py to register handlers.
"""

import logging

from django.dispatch import receiver

from workshop.signals import order_cancelled, stock_adjusted

logger = logging.getLogger(__name__)


@receiver(stock_adjusted)
def warn_on_low_stock(sender, item, delta, entry, **kwargs):
    """
    Warn when a deduction takes an item below its reorder level.

    Only fires on the crossing, not on every deduction while low.
    """
    if delta >= 0:
        return

    previous = item.quantity - delta
    if item.quantity < item.reorder_level <= previous:
        logger.warning(
            f"Low stock: {item.name} at {item.quantity} (reorder level {item.reorder_level})",
            extra={
                "item": item.pk,
                "quantity": item.quantity,
                "reorder_level": item.reorder_level,
            },
        )


@receiver(order_cancelled)
def log_order_cancelled(sender, work_order, reason, actor, **kwargs):
    logger.info(
        f"WorkOrder {work_order.code} cancelled by {actor}: {reason}",
        extra={
            "work_order": work_order.code,
            "reason": reason,
            "actor": actor,
        },
    )
