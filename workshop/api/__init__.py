"""
Workshop REST API.

Provides DRF ViewSets for:
- Item (read, create, recipe, manual adjustment)
- Transaction (ledger list, administrative delete)
- Worker (read-only)
- WorkOrder (read, issue, complete / deliver, cancel)
"""
