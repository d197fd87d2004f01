"""
Django Workshop app configuration.
"""

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class WorkshopConfig(AppConfig):
    """Workshop application configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "workshop"
    verbose_name = _("Workshop")

    def ready(self):
        """Import signal handlers when app is ready."""
        from workshop.signals import handlers  # noqa: F401
