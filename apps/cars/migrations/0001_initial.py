import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.cars.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Car",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("brand", models.CharField(blank=True, max_length=60)),
                ("city", models.CharField(blank=True, max_length=80)),
                (
                    "price_per_day",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Daily rate. Changing it never affects existing reservations.",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "currency",
                    models.CharField(default=apps.cars.models.default_currency, editable=False, max_length=3),
                ),
                (
                    "availability",
                    models.CharField(
                        choices=[("available", "Available"), ("maintenance", "In maintenance")],
                        default="available",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cars",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Car",
                "verbose_name_plural": "Cars",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["owner", "availability"], name="car_owner_availability_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(price_per_day__gt=0),
                        name="car_price_per_day_positive",
                    ),
                ],
            },
        ),
    ]
