"""
Workshop API URLs.

Include this in your project's urlpatterns:

    path('api/workshop/', include('workshop.api.urls')),
"""

from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    DashboardView,
    ItemViewSet,
    TransactionViewSet,
    WorkerViewSet,
    WorkOrderViewSet,
)

router = DefaultRouter()
router.register("items", ItemViewSet)
router.register("transactions", TransactionViewSet)
router.register("workers", WorkerViewSet)
router.register("work-orders", WorkOrderViewSet)

urlpatterns = [
    path("dashboard/", DashboardView.as_view(), name="workshop-dashboard"),
    *router.urls,
]
