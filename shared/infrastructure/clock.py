"""Clock helpers for the HTTP boundary.

The engine only understands calendar dates. The current instant is turned
into "today" once, here, in the platform's configured time zone.
"""

from __future__ import annotations

from django.utils import timezone  # type: ignore

from shared.domain.value_objects import CalendarDate


def local_today() -> CalendarDate:
    """Today's calendar date in ``settings.TIME_ZONE``."""

    return CalendarDate.from_instant(timezone.now(), timezone.get_default_timezone())
