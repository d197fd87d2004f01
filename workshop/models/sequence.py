"""
Yearly counters behind work order codes.

    CodeSequence.next_code("JOB")  # "JOB-2026-00001", "JOB-2026-00002", ...

Numbering restarts each year and is kept per prefix, so "JOB" and "WO"
codes never share a counter.
"""

from django.db import models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

CODE_DIGITS = 5


class CodeSequence(models.Model):
    """One counter row per "<prefix>-<year>" key."""

    prefix = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_("Prefix"),
    )
    last_value = models.PositiveIntegerField(
        default=0,
        verbose_name=_("Last value"),
    )

    class Meta:
        db_table = "workshop_code_sequence"
        verbose_name = _("Code Sequence")
        verbose_name_plural = _("Code Sequences")

    def __str__(self) -> str:
        return f"{self.prefix}: {self.last_value}"

    @classmethod
    def next_value(cls, key: str) -> int:
        """
        Increment the counter for key and return the new value.

        The row is locked until the surrounding transaction ends, so two
        orders issued together wait for each other instead of sharing a number.
        """
        with transaction.atomic():
            row, _created = cls.objects.select_for_update().get_or_create(prefix=key)
            row.last_value = models.F("last_value") + 1
            row.save(update_fields=["last_value"])
            row.refresh_from_db(fields=["last_value"])
            return row.last_value

    @classmethod
    def next_code(cls, prefix: str, year: int | None = None) -> str:
        """Next "<prefix>-<year>-NNNNN" code, year defaulting to the current one."""
        key = f"{prefix}-{year or timezone.now().year}"
        return f"{key}-{cls.next_value(key):0{CODE_DIGITS}d}"