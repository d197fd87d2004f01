"""
Workshop API ViewSets.

Every write goes through the workshop service; the views only translate
HTTP input into service calls and ShopError into HTTP responses.
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from workshop.conf import get_identity_backend
from workshop.exceptions import (
    AlreadySettledError,
    AuthorizationError,
    InsufficientStockError,
    NoRecipeError,
    NotFoundError,
    ShopError,
)
from workshop.models import Item, Transaction, Worker, WorkOrder
from workshop.permissions import require_admin
from workshop.results import Proof
from workshop.service import Shop

from .serializers import (
    ItemCreateSerializer,
    ItemSerializer,
    RecipeInputSerializer,
    RecipeLineSerializer,
    StockAdjustSerializer,
    TransactionFilterSerializer,
    TransactionSerializer,
    WorkerSerializer,
    WorkOrderCancelSerializer,
    WorkOrderIssueSerializer,
    WorkOrderSerializer,
    WorkOrderSettleSerializer,
)

ERROR_STATUS = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (AlreadySettledError, status.HTTP_409_CONFLICT),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (NoRecipeError, status.HTTP_400_BAD_REQUEST),
]


def status_for(exc: ShopError) -> int:
    for error_class, http_status in ERROR_STATUS:
        if isinstance(exc, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


class ShopViewMixin:
    """Resolves the acting user and maps ShopError to responses."""

    permission_classes = [IsAuthenticated]

    def get_actor(self):
        actor = get_identity_backend().actor_for(self.request.user)
        if actor is None:
            raise PermissionDenied("User has no role in the workshop.")
        return actor

    def handle_exception(self, exc):
        if isinstance(exc, ShopError):
            return Response(exc.as_dict(), status=status_for(exc))
        return super().handle_exception(exc)


class ItemViewSet(ShopViewMixin, viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Item.

    list: All items by name (?category=finished_good to filter)
    create: Add an item (admin)
    retrieve: One item with its recipe
    recipe: GET the recipe, PUT to replace it (admin)
    adjust: Manual stock correction (admin)
    low_stock: Items below their reorder level
    """

    serializer_class = ItemSerializer
    queryset = Item.objects.prefetch_related("recipe_lines")

    def get_queryset(self):
        if self.action == "list":
            return Shop.list_items(category=self.request.query_params.get("category"))
        return super().get_queryset()

    def create(self, request):
        """
        POST /api/workshop/items/
        {"name": "Screw", "category": "raw_material", "quantity": 100, "unit_price": "2.00"}
        """
        serializer = ItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        item = Shop.create_item(actor=self.get_actor(), **serializer.validated_data)
        return Response(ItemSerializer(item).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "put"])
    def recipe(self, request, pk=None):
        """
        Read or replace the recipe.

        PUT /api/workshop/items/{pk}/recipe/
        {"lines": [{"ingredient": 3, "quantity": 2}, ...]}
        """
        item = self.get_object()

        if request.method == "PUT":
            serializer = RecipeInputSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            Shop.set_recipe(item, serializer.validated_data["lines"], actor=self.get_actor())

        return Response(RecipeLineSerializer(item.get_recipe(), many=True).data)

    @action(detail=True, methods=["post"])
    def adjust(self, request, pk=None):
        """
        POST /api/workshop/items/{pk}/adjust/
        {"adjustment": -3, "reason": "Damaged"}
        """
        item = self.get_object()
        serializer = StockAdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = Shop.adjust_stock(
            item,
            serializer.validated_data["adjustment"],
            serializer.validated_data["reason"],
            actor=self.get_actor(),
        )
        return Response(
            {"quantity": item.quantity, "entry": TransactionSerializer(entry).data}
        )

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        return Response(ItemSerializer(Shop.low_stock(), many=True).data)


class TransactionViewSet(
    ShopViewMixin,
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for the ledger (admin only).

    list: Entries newest first (?item=&kind=&direction=&date_from=&date_to=)
    destroy: Administrative removal; stock is NOT reversed
    """

    serializer_class = TransactionSerializer
    queryset = Transaction.objects.all()

    def get_queryset(self):
        require_admin(self.get_actor(), "view_ledger")

        filters = TransactionFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return Shop.query(**filters.validated_data)

    def destroy(self, request, pk=None):
        Shop.delete_entry(pk, actor=self.get_actor())
        return Response(status=status.HTTP_204_NO_CONTENT)


class WorkerViewSet(ShopViewMixin, viewsets.ReadOnlyModelViewSet):
    """Workers work orders can be assigned to."""

    serializer_class = WorkerSerializer
    queryset = Worker.objects.assignable()


class WorkOrderViewSet(ShopViewMixin, viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for WorkOrder.

    list: Pending first, newest first; non-admins see their own orders only
    create: Issue an order (admin)
    retrieve: One order by UUID
    complete / deliver / settle: PENDING → COMPLETED
    cancel: PENDING → CANCELLED, stock returned (admin)
    """

    serializer_class = WorkOrderSerializer
    queryset = WorkOrder.objects.select_related("assigned_to", "item")
    lookup_field = "uuid"

    def get_queryset(self):
        if self.action == "list":
            params = self.request.query_params
            return Shop.list_orders(
                actor=self.get_actor(),
                status=params.get("status"),
                kind=params.get("kind"),
            )
        return super().get_queryset()

    def create(self, request):
        """
        Issue a work order.

        POST /api/workshop/work-orders/
        {"assignee": 2, "item": 5, "quantity": 10, "kind": "ASSEMBLY"}
        """
        serializer = WorkOrderIssueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = Shop.issue(actor=self.get_actor(), **serializer.validated_data)
        return Response(WorkOrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def complete(self, request, uuid=None):
        """
        POST /api/workshop/work-orders/{uuid}/complete/
        {"proof": {"photo": "...", "location": {"lat": 12.9, "lng": 77.6}}}
        """
        return self._settle(request, "complete")

    @action(detail=True, methods=["post"])
    def deliver(self, request, uuid=None):
        """
        POST /api/workshop/work-orders/{uuid}/deliver/
        {"client_name": "Acme", "proof": {...}}
        """
        return self._settle(request, "deliver")

    @action(detail=True, methods=["post"])
    def settle(self, request, uuid=None):
        """Complete or deliver, whichever the order's kind settles with."""
        return self._settle(request, "settle")

    @action(detail=True, methods=["post"])
    def cancel(self, request, uuid=None):
        """
        POST /api/workshop/work-orders/{uuid}/cancel/
        {"reason": "Client withdrew"}
        """
        order = self.get_object()
        serializer = WorkOrderCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = Shop.cancel(
            order, serializer.validated_data["reason"], actor=self.get_actor()
        )
        return Response(WorkOrderSerializer(order).data)

    def _settle(self, request, operation: str):
        order = self.get_object()
        serializer = WorkOrderSettleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        proof = Proof.from_payload(serializer.validated_data["proof"])
        client_name = serializer.validated_data["client_name"]
        actor = self.get_actor()

        if operation == "complete":
            order = Shop.complete(order, proof=proof, actor=actor)
        elif operation == "deliver":
            order = Shop.deliver(order, client_name=client_name, proof=proof, actor=actor)
        else:
            order = Shop.settle(order, proof=proof, client_name=client_name, actor=actor)

        return Response(WorkOrderSerializer(order).data)


class DashboardView(ShopViewMixin, APIView):
    """
    Headline numbers.

    GET /api/workshop/dashboard/
    """

    def get(self, request):
        require_admin(self.get_actor(), "view_dashboard")
        return Response(Shop.dashboard().as_dict())
