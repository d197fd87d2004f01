"""
Worker model.

Worker = Person work orders are assigned to (factory or delivery staff).
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from workshop.protocols.identity import Role


class WorkerQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def assignable(self):
        """Workers that can receive orders (everyone but admins)."""
        return self.active().exclude(role=Role.ADMIN)


class Worker(models.Model):
    """Factory or delivery worker, optionally linked to a login."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="worker",
        verbose_name=_("User"),
    )
    name = models.CharField(
        max_length=200,
        verbose_name=_("Name"),
    )
    employee_code = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_("Employee Code"),
        help_text=_("Ex: EMP-101"),
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.FACTORY,
        db_index=True,
        verbose_name=_("Role"),
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name=_("Active"),
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))

    history = HistoricalRecords()

    objects = WorkerQuerySet.as_manager()

    class Meta:
        db_table = "workshop_worker"
        verbose_name = _("Worker")
        verbose_name_plural = _("Workers")
        ordering = ["name"]

    def __str__(self) -> str:
        if self.employee_code:
            return f"{self.name} ({self.employee_code})"
        return self.name
