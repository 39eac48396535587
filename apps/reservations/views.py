"""API views for the reservations domain.

Every mutation goes through ``BookingService``; views never change a
reservation row directly. Domain errors propagate to
``shared.infrastructure.api_errors.domain_exception_handler``.
"""

from __future__ import annotations

import logging
from uuid import UUID

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.infrastructure.clock import local_today
from .application.booking_service import BookingService
from .domain.exceptions import NotFoundError
from .filters import ReservationFilterSet
from .infrastructure.repositories import DjangoCarRegistry, DjangoReservationStore
from .models import Reservation
from .serializers import (
    AvailabilityQuerySerializer,
    DecisionSerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
)

logger = logging.getLogger(__name__)


def build_booking_service() -> BookingService:
    return BookingService(DjangoCarRegistry(), DjangoReservationStore(), clock=local_today)


class ReservationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reservations of the current user.

    ``?as=owner`` lists reservations on the user's cars instead of the
    user's own requests. ``?presentation=`` filters on the derived status
    (pending, upcoming, active, completed, cancelled).
    """

    queryset = Reservation.objects.select_related("car").all()
    permission_classes = [permissions.IsAuthenticated]
    filterset_class = ReservationFilterSet
    serializer_class = ReservationSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if self.action == "retrieve":
            return qs.filter(renter=user) | qs.filter(car__owner=user)
        if self.request.query_params.get("as") == "owner":
            return qs.filter(car__owner=user)
        return qs.filter(renter=user)

    def get_serializer_context(self):  # type: ignore
        context = super().get_serializer_context()
        context["today"] = local_today()
        return context

    def get_service(self) -> BookingService:
        return build_booking_service()

    def _reservation_id(self) -> UUID:
        try:
            return UUID(str(self.kwargs["pk"]))
        except ValueError:
            raise NotFoundError(f"Reservation {self.kwargs['pk']} not found") from None

    def _to_domain(self, queryset):  # type: ignore
        return [DjangoReservationStore.to_domain(model) for model in queryset]

    def list(self, request, *args, **kwargs):  # type: ignore
        context = self.get_serializer_context()
        reservations = self._to_domain(self.filter_queryset(self.get_queryset()))
        presentation = request.query_params.get("presentation")
        if presentation:
            reservations = [
                r for r in reservations
                if r.presentation_status(context["today"]).value == presentation
            ]
        serializer = ReservationSerializer(reservations, many=True, context=context)
        return Response(serializer.data)

    def retrieve(self, request, *args, **kwargs):  # type: ignore
        reservation = DjangoReservationStore.to_domain(self.get_object())
        serializer = ReservationSerializer(reservation, context=self.get_serializer_context())
        return Response(serializer.data)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        reservation = self.get_service().create(
            car_id=data["car"],
            renter_id=request.user.pk,
            dates=data["dates"],
            tier=data["insurance_tier"],
            extras=data["extras"],
            payment_method=data["payment_method"],
            renter_name=data["renter_name"],
            renter_email=data["renter_email"],
            renter_phone=data["renter_phone"],
        )
        read_serializer = ReservationSerializer(reservation, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def decide(self, request, pk=None):  # type: ignore
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = self.get_service().decide(
            self._reservation_id(), request.user.pk, serializer.validated_data["decision"]
        )
        return Response(ReservationSerializer(reservation, context=self.get_serializer_context()).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        reservation = self.get_service().cancel(self._reservation_id(), request.user.pk)
        return Response(ReservationSerializer(reservation, context=self.get_serializer_context()).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):  # type: ignore
        """Reservation counts per presentation status (tab badges)."""
        context = self.get_serializer_context()
        reservations = self._to_domain(self.get_queryset())
        counts = self.get_service().status_counts(reservations, context["today"])
        return Response({"total": len(reservations), "counts": counts})


class CarAvailabilityView(APIView):
    """Blocked dates of a car, plus an ``available`` flag for ``?start=&end=``."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, car_id):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        service = build_booking_service()
        service.car_registry.get_car(car_id)

        payload = {
            "car": str(car_id),
            "blocked_dates": [day.isoformat() for day in sorted(service.blocked_dates(car_id))],
        }
        dates = query.validated_data.get("dates")
        if dates is not None:
            payload["start"] = dates.start.isoformat()
            payload["end"] = dates.end.isoformat()
            payload["available"] = not service.has_conflict(car_id, dates)
        return Response(payload)
