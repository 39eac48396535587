"""Reservation persistence models for CarGO."""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.cars.models import default_currency


class Reservation(models.Model):
    """Renter's reservation of a car over an inclusive range of dates."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Waiting for the owner")
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")

    class InsuranceTier(models.TextChoices):
        BASIC = "basic", _("Basic")
        PREMIUM = "premium", _("Premium")
        FULL = "full", _("Full coverage")

    class PaymentMethod(models.TextChoices):
        CARD = "card", _("Card")
        CASH = "cash", _("Cash")

    class Actor(models.TextChoices):
        RENTER = "renter", _("Renter")
        OWNER = "owner", _("Owner")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    car = models.ForeignKey(
        "cars.Car",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    insurance_tier = models.CharField(max_length=16, choices=InsuranceTier.choices)
    extras = models.JSONField(default=list, blank=True)
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Fixed when the reservation is requested."),
    )
    currency = models.CharField(max_length=3, default=default_currency)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_method = models.CharField(
        max_length=8,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CARD,
        help_text=_("Recorded only, nothing is charged."),
    )
    renter_name = models.CharField(max_length=150, blank=True)
    renter_email = models.EmailField(blank=True)
    renter_phone = models.CharField(max_length=32, blank=True)
    decided_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=8, choices=Actor.choices, blank=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="reservation_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["car", "status"], name="reservation_car_status_idx"),
            models.Index(fields=["renter", "status"], name="reservation_renter_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.car_id}: {self.start_date} - {self.end_date} ({self.status})"
