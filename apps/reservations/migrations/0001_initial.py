import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.cars.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("cars", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "insurance_tier",
                    models.CharField(
                        choices=[("basic", "Basic"), ("premium", "Premium"), ("full", "Full coverage")],
                        max_length=16,
                    ),
                ),
                ("extras", models.JSONField(blank=True, default=list)),
                (
                    "total_price",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Fixed when the reservation is requested.",
                        max_digits=12,
                    ),
                ),
                ("currency", models.CharField(default=apps.cars.models.default_currency, max_length=3)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Waiting for the owner"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("card", "Card"), ("cash", "Cash")],
                        default="card",
                        help_text="Recorded only, nothing is charged.",
                        max_length=8,
                    ),
                ),
                ("renter_name", models.CharField(blank=True, max_length=150)),
                ("renter_email", models.EmailField(blank=True, max_length=254)),
                ("renter_phone", models.CharField(blank=True, max_length=32)),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "cancelled_by",
                    models.CharField(blank=True, choices=[("renter", "Renter"), ("owner", "Owner")], max_length=8),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                (
                    "car",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="cars.car",
                    ),
                ),
                (
                    "renter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["car", "status"], name="reservation_car_status_idx"),
                    models.Index(fields=["renter", "status"], name="reservation_renter_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_date__gte=models.F("start_date")),
                        name="reservation_valid_date_range",
                    ),
                ],
            },
        ),
    ]
