"""Car catalogue models for CarGO."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


def default_currency() -> str:
    return getattr(settings, "RENTAL_CURRENCY", "MAD")


class Car(models.Model):
    """Car offered for rent by its owner."""

    class Availability(models.TextChoices):
        AVAILABLE = "available", _("Available")
        MAINTENANCE = "maintenance", _("In maintenance")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cars",
    )
    name = models.CharField(max_length=120)
    brand = models.CharField(max_length=60, blank=True)
    city = models.CharField(max_length=80, blank=True)
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text=_("Daily rate. Changing it never affects existing reservations."),
    )
    currency = models.CharField(max_length=3, default=default_currency, editable=False)
    availability = models.CharField(
        max_length=20,
        choices=Availability.choices,
        default=Availability.AVAILABLE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Car")
        verbose_name_plural = _("Cars")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_day__gt=0),
                name="car_price_per_day_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["owner", "availability"], name="car_owner_availability_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.brand} {self.name}".strip()

    @property
    def is_bookable(self) -> bool:
        return self.availability == self.Availability.AVAILABLE
