"""
Workshop Admin - Basic Django admin for Item, Worker, WorkOrder, Transaction.

Stock quantities, ledger entries and work orders are read-only here: they
only change through the workshop service, so the ledger stays complete.
Deleting a ledger entry goes through Shop.delete_entry() and is logged.
"""

from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from workshop.conf import get_identity_backend
from workshop.models import Item, RecipeLine, Transaction, Worker, WorkOrder


# ── Item ──


class RecipeLineInline(admin.TabularInline):
    """Recipe lines, read-only (edit through Shop.set_recipe)."""

    model = RecipeLine
    fk_name = "item"
    extra = 0
    fields = ("position", "ingredient", "ingredient_name", "quantity_required")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Item)
class ItemAdmin(SimpleHistoryAdmin):
    """Admin for catalog items."""

    list_display = ("name", "code", "category", "quantity", "reorder_level", "unit_price")
    list_filter = ("category",)
    search_fields = ("name", "code")
    inlines = [RecipeLineInline]
    readonly_fields = ("uuid", "quantity", "created_at", "updated_at")


# ── Worker ──


@admin.register(Worker)
class WorkerAdmin(SimpleHistoryAdmin):
    """Admin for workers."""

    list_display = ("name", "employee_code", "role", "is_active")
    list_filter = ("role", "is_active")
    search_fields = ("name", "employee_code")
    raw_id_fields = ("user",)


# ── WorkOrder ──


@admin.register(WorkOrder)
class WorkOrderAdmin(SimpleHistoryAdmin):
    """Admin for work orders (read-only)."""

    list_display = ("code", "kind", "item_name", "quantity", "assignee_name", "status", "assigned_at")
    list_filter = ("status", "kind")
    search_fields = ("code", "item_name", "assignee_name", "client_name")
    date_hierarchy = "assigned_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ── Transaction ──


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """Admin for the ledger: view and administrative delete only."""

    list_display = ("created_at", "item_name", "direction", "quantity", "kind", "reason", "actor")
    list_filter = ("kind", "direction")
    search_fields = ("item_name", "item_code", "reason")
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def delete_model(self, request, obj):
        from workshop.service import Shop

        Shop.delete_entry(obj.pk, actor=get_identity_backend().actor_for(request.user))

    def delete_queryset(self, request, queryset):
        for entry in queryset:
            self.delete_model(request, entry)
