"""
Workshop Models.

Core models for inventory and work orders:
- Item: Stocked raw material or finished good
- RecipeLine: Ingredient of an item's recipe (BOM)
- Transaction: Immutable ledger of stock changes
- Worker: Person work orders are assigned to
- WorkOrder: Delegated build or delivery job
- CodeSequence: Atomic counter for WorkOrder codes
"""

from workshop.models.item import Item, ItemCategory, RecipeLine
from workshop.models.ledger import Direction, EntryKind, Transaction
from workshop.models.sequence import CodeSequence
from workshop.models.work_order import WorkOrder, WorkOrderKind, WorkOrderStatus
from workshop.models.worker import Worker

__all__ = [
    "Item",
    "ItemCategory",
    "RecipeLine",
    "Transaction",
    "Direction",
    "EntryKind",
    "Worker",
    "WorkOrder",
    "WorkOrderKind",
    "WorkOrderStatus",
    "CodeSequence",
]
