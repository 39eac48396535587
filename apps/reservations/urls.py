"""URL routing for the reservations domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import CarAvailabilityView, ReservationViewSet

router = DefaultRouter()
router.register(r"reservations", ReservationViewSet, basename="reservation")

urlpatterns = [
    path("", include(router.urls)),
    path(
        "cars/<uuid:car_id>/availability/",
        CarAvailabilityView.as_view(),
        name="car-availability",
    ),
]
