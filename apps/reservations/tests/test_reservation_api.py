"""Tests for the reservations and car availability API."""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from shared.infrastructure.clock import local_today
from apps.cars.models import Car
from apps.reservations.models import Reservation

User = get_user_model()


class ReservationAPITests(APITestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(username="owner", password="StrongPass123")
        self.renter = User.objects.create_user(username="renter", password="StrongPass123")
        self.other_renter = User.objects.create_user(username="renter2", password="StrongPass123")
        self.car = Car.objects.create(
            owner=self.owner,
            name="Clio 5",
            brand="Renault",
            city="Casablanca",
            price_per_day=Decimal("100.00"),
        )
        self.today = local_today()
        self.start = self.today.add_days(10)
        self.end = self.today.add_days(12)
        self.list_url = reverse("reservation-list")

    def _payload(self, **overrides):
        payload = {
            "car": str(self.car.id),
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat(),
            "insurance_tier": "basic",
            "extras": [],
            "payment_method": "card",
        }
        payload.update(overrides)
        return payload

    def _create(self, user=None, **overrides):
        self.client.force_authenticate(user or self.renter)
        return self.client.post(self.list_url, self._payload(**overrides), format="json")

    def _decide(self, reservation_id, decision, user=None):
        self.client.force_authenticate(user or self.owner)
        url = reverse("reservation-decide", kwargs={"pk": reservation_id})
        return self.client.post(url, {"decision": decision}, format="json")

    def _cancel(self, reservation_id, user):
        self.client.force_authenticate(user)
        return self.client.post(reverse("reservation-cancel", kwargs={"pk": reservation_id}))

    def test_create_returns_pending_reservation_with_total(self):
        response = self._create(extras=["gps", "child_seat"], renter_name="Youssef")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["presentation_status"], "pending")
        self.assertEqual(response.data["start_date"], self.start.isoformat())
        self.assertEqual(response.data["end_date"], self.end.isoformat())
        self.assertEqual(response.data["days"], 3)
        self.assertEqual(response.data["total_price"], "405.00")
        self.assertEqual(response.data["currency"], "MAD")
        self.assertEqual(response.data["extras"], ["child_seat", "gps"])
        stored = Reservation.objects.get(pk=response.data["id"])
        self.assertEqual(stored.renter, self.renter)
        self.assertEqual(stored.total_price, Decimal("405.00"))

    def test_dates_with_time_or_offset_are_rejected(self):
        response = self._create(start_date=f"{self.start.isoformat()}T00:00:00Z")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("start_date", response.data)

    def test_domain_errors_carry_their_code(self):
        cases = [
            ({"user": self.owner}, "self_booking"),
            ({"start_date": self.today.add_days(-1).isoformat()}, "invalid_range"),
            ({"start_date": self.end.isoformat(), "end_date": self.start.isoformat()}, "invalid_range"),
            ({"insurance_tier": "gold"}, "unknown_tier"),
            ({"extras": ["babySeat"]}, "unknown_extra"),
        ]
        for overrides, code in cases:
            with self.subTest(code=code):
                response = self._create(**overrides)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data["code"], code)
        self.assertEqual(Reservation.objects.count(), 0)

    def test_unknown_car_returns_404(self):
        response = self._create(car="00000000-0000-0000-0000-000000000000")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_car_in_maintenance_cannot_be_booked(self):
        self.car.availability = Car.Availability.MAINTENANCE
        self.car.save()

        response = self._create()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "car_unavailable")

    def test_owner_accepts_and_dates_become_blocked(self):
        reservation_id = self._create().data["id"]

        response = self._decide(reservation_id, "accept")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "confirmed")
        self.assertEqual(response.data["presentation_status"], "upcoming")

        self.client.force_authenticate(None)
        url = reverse("car-availability", kwargs={"car_id": self.car.id})
        availability = self.client.get(url, {"start": self.end.isoformat(), "end": self.end.add_days(2).isoformat()})
        self.assertEqual(availability.status_code, status.HTTP_200_OK)
        self.assertEqual(
            availability.data["blocked_dates"],
            [self.start.isoformat(), self.start.add_days(1).isoformat(), self.end.isoformat()],
        )
        self.assertFalse(availability.data["available"])

        free = self.client.get(url, {"start": self.end.add_days(1).isoformat(), "end": self.end.add_days(3).isoformat()})
        self.assertTrue(free.data["available"])

    def test_overlapping_acceptance_conflicts_until_first_is_cancelled(self):
        first_id = self._create().data["id"]
        self._decide(first_id, "accept")
        second_id = self._create(
            user=self.other_renter,
            start_date=self.start.add_days(1).isoformat(),
            end_date=self.end.add_days(1).isoformat(),
        ).data["id"]

        conflict = self._decide(second_id, "accept")
        self.assertEqual(conflict.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(conflict.data["code"], "conflict")
        self.assertEqual(Reservation.objects.get(pk=second_id).status, Reservation.Status.PENDING)

        self.assertEqual(self._cancel(first_id, self.renter).status_code, status.HTTP_200_OK)
        retried = self._decide(second_id, "accept")
        self.assertEqual(retried.status_code, status.HTTP_200_OK)
        self.assertEqual(retried.data["status"], "confirmed")

    def test_accepting_a_rejected_overlapping_request_is_403(self):
        first_id = self._create().data["id"]
        self._decide(first_id, "accept")
        second_id = self._create(
            user=self.other_renter,
            start_date=self.start.add_days(1).isoformat(),
            end_date=self.end.add_days(1).isoformat(),
        ).data["id"]
        self._decide(second_id, "reject")

        response = self._decide(second_id, "accept")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "forbidden_transition")

    def test_renter_cannot_decide(self):
        reservation_id = self._create().data["id"]

        response = self._decide(reservation_id, "accept", user=self.renter)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "forbidden_transition")

    def test_invalid_decision_value(self):
        reservation_id = self._create().data["id"]

        response = self._decide(reservation_id, "maybe")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_twice_is_forbidden(self):
        reservation_id = self._create().data["id"]

        first = self._cancel(reservation_id, self.renter)
        second = self._cancel(reservation_id, self.renter)

        self.assertEqual(first.data["status"], "cancelled")
        self.assertEqual(first.data["cancelled_by"], "renter")
        self.assertEqual(second.status_code, status.HTTP_403_FORBIDDEN)

    def test_unrelated_user_cannot_see_or_cancel(self):
        reservation_id = self._create().data["id"]
        self.client.force_authenticate(self.other_renter)

        detail = self.client.get(reverse("reservation-detail", kwargs={"pk": reservation_id}))
        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self._cancel(reservation_id, self.other_renter).status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_and_renter_can_retrieve(self):
        reservation_id = self._create().data["id"]
        url = reverse("reservation-detail", kwargs={"pk": reservation_id})
        for user in (self.owner, self.renter):
            with self.subTest(user=user.username):
                self.client.force_authenticate(user)
                response = self.client.get(url)
                self.assertEqual(response.status_code, status.HTTP_200_OK)
                self.assertEqual(response.data["id"], reservation_id)

    def test_listing_as_renter_and_owner(self):
        first_id = self._create().data["id"]
        self._decide(first_id, "accept")
        self._create(
            user=self.other_renter,
            start_date=self.today.add_days(20).isoformat(),
            end_date=self.today.add_days(21).isoformat(),
        )

        self.client.force_authenticate(self.renter)
        mine = self.client.get(self.list_url)
        self.assertEqual([r["id"] for r in mine.data], [first_id])

        self.client.force_authenticate(self.owner)
        owned = self.client.get(self.list_url, {"as": "owner"})
        self.assertEqual(len(owned.data), 2)
        upcoming = self.client.get(self.list_url, {"as": "owner", "presentation": "upcoming"})
        self.assertEqual([r["id"] for r in upcoming.data], [first_id])
        pending = self.client.get(self.list_url, {"as": "owner", "status": "pending"})
        self.assertEqual(len(pending.data), 1)

        summary = self.client.get(reverse("reservation-summary"), {"as": "owner"})
        self.assertEqual(summary.data["total"], 2)
        self.assertEqual(
            summary.data["counts"],
            {"pending": 1, "upcoming": 1, "active": 0, "completed": 0, "cancelled": 0},
        )

    def test_authentication_is_required(self):
        self.client.force_authenticate(None)

        response = self.client.get(self.list_url)

        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_availability_needs_both_bounds(self):
        url = reverse("car-availability", kwargs={"car_id": self.car.id})

        response = self.client.get(url, {"start": self.start.isoformat()})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
