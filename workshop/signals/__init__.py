"""
Workshop Signals.

Other apps hook into the workshop through these signals; the workshop
itself only logs some of them (see workshop.signals.handlers).

Signals:
    stock_adjusted: An item's quantity changed
    order_issued: A work order was issued and its stock committed
    order_settled: A work order was completed or delivered
    order_cancelled: A pending work order was cancelled and its stock restored
    ledger_entry_deleted: An admin removed a ledger entry (stock not reversed)
"""

from django.dispatch import Signal

# An item's quantity changed
# Sent after commit by the stock mutator
# Args: item, delta, entry
stock_adjusted = Signal()

# Work order issued
# Sent after commit by shop.issue()
# Args: work_order, actor
order_issued = Signal()

# Work order settled
# Sent after commit by shop.complete() / shop.deliver()
# Args: work_order, actor
order_settled = Signal()

# Work order cancelled
# Sent after commit by shop.cancel()
# Args: work_order, reason, actor
order_cancelled = Signal()

# Ledger entry deleted by an admin
# Args: entry_id, item, direction, quantity, kind, actor
ledger_entry_deleted = Signal()

__all__ = [
    "stock_adjusted",
    "order_issued",
    "order_settled",
    "order_cancelled",
    "ledger_entry_deleted",
]
