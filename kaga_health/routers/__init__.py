from . import appointments, auth, bookings, health, notes, patients, schedules, staff, users

__all__ = [
    "appointments",
    "auth",
    "bookings",
    "health",
    "notes",
    "patients",
    "schedules",
    "staff",
    "users",
]
