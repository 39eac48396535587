"""Serializers for the reservations API.

Dates cross the API as plain ``YYYY-MM-DD`` strings in both directions.
They are parsed straight into ``CalendarDate`` and never pass through a
datetime, so no time zone can shift them.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.domain.exceptions import InvalidRangeError
from shared.domain.value_objects import CalendarDate, DateRange
from apps.reservations.application.command_handlers import Decision
from apps.reservations.domain.entities import PaymentMethod


class CalendarDateField(serializers.Field):
    """Calendar date on the wire: ``YYYY-MM-DD``, no time, no offset."""

    default_error_messages = {
        "invalid": "Date must be a calendar date formatted as YYYY-MM-DD.",
    }

    def to_internal_value(self, data):  # type: ignore
        try:
            return CalendarDate.parse(data)
        except InvalidRangeError:
            self.fail("invalid")

    def to_representation(self, value):  # type: ignore
        return value.isoformat()


class ReservationCreateSerializer(serializers.Serializer):
    """Renter's request for a car.

    Tier and extras stay free-form strings here so that unknown keys reach
    the pricing rules and fail with their own error codes.
    """

    car = serializers.UUIDField()
    start_date = CalendarDateField()
    end_date = CalendarDateField()
    insurance_tier = serializers.CharField()
    extras = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    payment_method = serializers.ChoiceField(
        choices=[method.value for method in PaymentMethod],
        default=PaymentMethod.CARD.value,
    )
    renter_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    renter_email = serializers.EmailField(required=False, allow_blank=True, default="")
    renter_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        attrs["dates"] = DateRange(attrs.pop("start_date"), attrs.pop("end_date"))
        return attrs


class DecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[decision.value for decision in Decision])


class ReservationSerializer(serializers.Serializer):
    """Read representation of a domain ``Reservation``.

    ``presentation_status`` is computed against ``context["today"]``.
    """

    id = serializers.UUIDField(read_only=True)
    car = serializers.UUIDField(source="car_id", read_only=True)
    renter = serializers.CharField(source="renter_id", read_only=True)
    start_date = CalendarDateField(source="dates.start", read_only=True)
    end_date = CalendarDateField(source="dates.end", read_only=True)
    days = serializers.IntegerField(read_only=True)
    insurance_tier = serializers.CharField(source="insurance_tier.value", read_only=True)
    extras = serializers.SerializerMethodField()
    total_price = serializers.DecimalField(
        source="total_price.amount", max_digits=12, decimal_places=2, read_only=True
    )
    currency = serializers.CharField(source="total_price.currency", read_only=True)
    status = serializers.CharField(source="status.value", read_only=True)
    presentation_status = serializers.SerializerMethodField()
    payment_method = serializers.CharField(source="payment_method.value", read_only=True)
    renter_name = serializers.CharField(read_only=True)
    renter_email = serializers.CharField(read_only=True)
    renter_phone = serializers.CharField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    decided_at = serializers.DateTimeField(read_only=True)
    cancelled_at = serializers.DateTimeField(read_only=True)
    cancelled_by = serializers.SerializerMethodField()

    def get_extras(self, obj):  # type: ignore
        return sorted(extra.value for extra in obj.extras)

    def get_presentation_status(self, obj):  # type: ignore
        return obj.presentation_status(self.context["today"]).value

    def get_cancelled_by(self, obj):  # type: ignore
        return obj.cancelled_by.value if obj.cancelled_by else None


class AvailabilityQuerySerializer(serializers.Serializer):
    """Optional candidate range for the availability endpoint."""

    start = CalendarDateField(required=False)
    end = CalendarDateField(required=False)

    def validate(self, attrs):  # type: ignore
        if ("start" in attrs) != ("end" in attrs):
            raise serializers.ValidationError("Provide both start and end, or neither.")
        if "start" in attrs:
            attrs["dates"] = DateRange(attrs["start"], attrs["end"])
        return attrs
