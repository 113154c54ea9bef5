import os
import tempfile
import uuid
from dataclasses import dataclass, field
from typing import Optional

# Point the app at a throwaway SQLite file before kaga_health reads its settings
_DB_DIR = tempfile.mkdtemp(prefix="kaga_health_tests_")
os.environ["SQL_DSN"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["REQUIRE_PUBLISHED_AVAILABILITY"] = "true"

import httpx  # noqa: E402
import pytest  # noqa: E402

import kaga_health.models  # noqa: E402,F401
from kaga_health.core.security import create_access_token, hash_password  # noqa: E402
from kaga_health.db.base import Base  # noqa: E402
from kaga_health.db.sql import AsyncSessionLocal, engine  # noqa: E402
from kaga_health.main import app  # noqa: E402
from kaga_health.modules.patients.models import Patient  # noqa: E402
from kaga_health.modules.schedules.models import WorkSchedule, WorkScheduleSlot  # noqa: E402
from kaga_health.modules.schedules.schemas import WEEKDAYS  # noqa: E402
from kaga_health.modules.staff.models import MedicalStaff  # noqa: E402
from kaga_health.modules.users.models import User, UserRole  # noqa: E402

PASSWORD = "Secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@dataclass
class Actor:
    user: User
    headers: dict = field(default_factory=dict)
    profile_id: Optional[uuid.UUID] = None  # patients.id or medical_staff.id


def bearer(user: User) -> dict:
    token = create_access_token(subject=str(user.id), email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
async def schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def create_user():
    async def _create(
        role: UserRole = UserRole.PATIENT,
        *,
        first_name: str = "Test",
        last_name: str = "User",
        email: Optional[str] = None,
    ) -> User:
        email = email or f"{first_name}.{last_name}.{uuid.uuid4().hex[:6]}@kagamail.com".lower()
        async with AsyncSessionLocal() as session:
            user = User(
                email=email,
                password_hash=PASSWORD_HASH,
                first_name=first_name,
                last_name=last_name,
                role=role.value,
            )
            session.add(user)
            await session.commit()
            return user

    return _create


@pytest.fixture
def create_patient(create_user):
    async def _create(first_name: str = "Pat", last_name: str = "Ient") -> Actor:
        user = await create_user(UserRole.PATIENT, first_name=first_name, last_name=last_name)
        async with AsyncSessionLocal() as session:
            patient = Patient(user_id=user.id, gender="Female")
            session.add(patient)
            await session.commit()
            return Actor(user=user, headers=bearer(user), profile_id=patient.id)

    return _create


@pytest.fixture
def create_doctor(create_user):
    async def _create(
        first_name: str = "Sarah",
        last_name: str = "Johnson",
        department: str = "Cardiology",
        schedule: Optional[dict[str, list[str]]] = None,
    ) -> Actor:
        """schedule: {"Monday": ["09:00", "10:00"], ...}; None publishes nothing."""
        user = await create_user(UserRole.DOCTOR, first_name=first_name, last_name=last_name)
        async with AsyncSessionLocal() as session:
            staff = MedicalStaff(user_id=user.id, department=department, email=user.email)
            session.add(staff)
            await session.flush()
            if schedule is not None:
                session.add(
                    WorkSchedule(
                        doctor_id=staff.id,
                        slots=[
                            WorkScheduleSlot(day=day, day_index=WEEKDAYS.index(day), slot=slot)
                            for day, slots in schedule.items()
                            for slot in slots
                        ],
                    )
                )
            await session.commit()
            return Actor(user=user, headers=bearer(user), profile_id=staff.id)

    return _create


@pytest.fixture
async def admin(create_user) -> Actor:
    user = await create_user(UserRole.ADMIN, first_name="Ada", last_name="Admin")
    return Actor(user=user, headers=bearer(user))
