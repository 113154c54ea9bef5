# kaga_health/scripts/seed_doctors.py
"""
Seed the default hospital doctors, their staff profiles and a weekday schedule.

    python -m kaga_health.scripts.seed_doctors [--reset] [--password PW]

Existing doctors (matched by email) are left as they are unless --reset is given.
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy import delete, select

from kaga_health.core.config import settings
from kaga_health.core.logging import configure_logging
from kaga_health.core.security import hash_password
from kaga_health.db.sql import AsyncSessionLocal, engine, init_db
from kaga_health.modules.schedules.models import WorkSchedule, WorkScheduleSlot
from kaga_health.modules.schedules.schemas import WEEKDAYS
from kaga_health.modules.staff.models import MedicalStaff
from kaga_health.modules.users.models import User, UserRole

logger = logging.getLogger("kaga_health.seed")

# (first name, last name, department)
DOCTORS: list[tuple[str, str, str]] = [
    ("Ben", "Mitchell", "General Medicine"),
    ("Sarah", "Johnson", "Cardiology"),
    ("Robert", "Miller", "Cardiology"),
    ("Michael", "Chen", "General Medicine"),
    ("Lisa", "Wang", "General Medicine"),
    ("Emily", "Rodriguez", "Dental"),
    ("David", "Kim", "Dental"),
    ("Jennifer", "Lee", "Pediatrics"),
    ("Mark", "Thompson", "Pediatrics"),
    ("James", "Wilson", "Orthopedics"),
    ("Maria", "Garcia", "Orthopedics"),
    ("Amanda", "Davis", "Dermatology"),
    ("Kevin", "Brown", "Dermatology"),
    ("Rachel", "Adams", "Neurology"),
    ("Thomas", "Clark", "Neurology"),
    ("Susan", "Martinez", "Gynecology"),
    ("Laura", "Anderson", "Gynecology"),
]

EMAIL_DOMAIN = "kagahospital.com"
DEFAULT_PHONE = "+256700000000"
WORKDAYS = WEEKDAYS[:5]
DEFAULT_SLOTS = ("09:00", "10:00", "11:00", "12:00", "14:00", "15:00", "16:00")


def doctor_email(first_name: str, last_name: str) -> str:
    return f"{first_name}.{last_name}@{EMAIL_DOMAIN}".lower()


async def seed_doctors(*, reset: bool = False, password: str | None = None) -> int:
    """Create missing doctors; returns how many were created."""
    password_hash = hash_password(password or settings.DEFAULT_SEED_PASSWORD)
    created = 0

    async with AsyncSessionLocal() as session:
        if reset:
            await session.execute(delete(User).where(User.role == UserRole.DOCTOR.value))
            logger.info("cleared existing doctor accounts")

        for first_name, last_name, department in DOCTORS:
            email = doctor_email(first_name, last_name)
            exists = await session.execute(select(User.id).where(User.email == email))
            if exists.scalar_one_or_none():
                continue

            user = User(
                email=email,
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                role=UserRole.DOCTOR.value,
            )
            session.add(user)
            await session.flush()

            staff = MedicalStaff(
                user_id=user.id,
                department=department,
                email=email,
                phone_number=DEFAULT_PHONE,
                bio=f"Experienced {department} specialist",
            )
            session.add(staff)
            await session.flush()

            schedule = WorkSchedule(
                doctor_id=staff.id,
                slots=[
                    WorkScheduleSlot(day=day, day_index=WEEKDAYS.index(day), slot=slot)
                    for day in WORKDAYS
                    for slot in DEFAULT_SLOTS
                ],
            )
            session.add(schedule)
            created += 1
            logger.info("created doctor: Dr. %s %s (%s)", first_name, last_name, department)

        await session.commit()
    return created


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the default hospital doctors.")
    parser.add_argument("--reset", action="store_true", help="delete existing doctor accounts first")
    parser.add_argument("--password", default=None, help="password for every seeded doctor")
    args = parser.parse_args(argv)

    configure_logging()

    async def _run() -> int:
        await init_db()
        try:
            return await seed_doctors(reset=args.reset, password=args.password)
        finally:
            await engine.dispose()

    created = asyncio.run(_run())
    logger.info("seeded %d doctors", created)


if __name__ == "__main__":
    main()
