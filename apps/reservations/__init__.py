"""Reservations app package.

This app holds the booking engine: the availability calendar for each
car, price calculation, and the reservation lifecycle (pending, confirmed,
cancelled) with its per-car serialization of owner decisions. What a
reservation looks like to users (upcoming, active, completed) is derived
from the calendar date and never stored.
"""
