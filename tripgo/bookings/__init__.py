"""Bookings — customer reservations and the admin booking desk."""
