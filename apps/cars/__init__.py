"""Cars app package.

Holds the car catalogue entry the booking engine needs: who owns the car,
its daily rate and whether it can currently be booked. Search, photos and
documents live outside this project.
"""
