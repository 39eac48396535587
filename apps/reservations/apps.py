"""App configuration for reservations."""

from __future__ import annotations

from django.apps import AppConfig  # type: ignore


class ReservationsConfig(AppConfig):
    name = "apps.reservations"
    label = "reservations"
    verbose_name = "Reservations"

    def ready(self):  # type: ignore
        from shared.application.message_bus import message_bus
        from .application.event_handlers import register_event_handlers

        register_event_handlers(message_bus)
