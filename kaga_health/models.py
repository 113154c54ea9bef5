# kaga_health/models.py
"""
Import every ORM model so Base.metadata knows all tables
(used by init_db, Alembic autogenerate and the test suite).
"""
from kaga_health.modules.users.models import AuditLog, User, UserRole
from kaga_health.modules.patients.models import Patient
from kaga_health.modules.staff.models import DEPARTMENTS, MedicalStaff
from kaga_health.modules.schedules.models import WorkSchedule, WorkScheduleSlot
from kaga_health.modules.appointments.models import Appointment, ApptStatus
from kaga_health.modules.bookings.models import Booking, PaymentMethod, PaymentStatus
from kaga_health.modules.notes.models import DoctorNote

__all__ = [
    "AuditLog",
    "User",
    "UserRole",
    "Patient",
    "DEPARTMENTS",
    "MedicalStaff",
    "WorkSchedule",
    "WorkScheduleSlot",
    "Appointment",
    "ApptStatus",
    "Booking",
    "PaymentMethod",
    "PaymentStatus",
    "DoctorNote",
]
