import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

MIGRATIONS = Path(__file__).resolve().parents[1] / "infra" / "migrations"


def alembic_config(db_path: Path) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS))
    cfg.set_main_option("sqlalchemy.url", f"sqlite+aiosqlite:///{db_path}")
    return cfg


def table_names(db_path: Path) -> set[str]:
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def appointment_indexes(db_path: Path) -> dict[str, dict]:
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        return {ix["name"]: ix for ix in inspect(engine).get_indexes("appointments")}
    finally:
        engine.dispose()


async def test_initial_revision_upgrades_and_downgrades(tmp_path):
    db_path = tmp_path / "migrated.db"
    cfg = alembic_config(db_path)

    # env.py drives its own event loop, so it runs off the test's loop
    await asyncio.to_thread(command.upgrade, cfg, "head")

    assert {
        "users",
        "patients",
        "medical_staff",
        "work_schedules",
        "work_schedule_slots",
        "appointments",
        "bookings",
        "doctor_notes",
        "audit_logs",
    } <= table_names(db_path)

    active_slot = appointment_indexes(db_path)["uq_appt_doctor_date_slot_active"]
    assert active_slot["unique"]
    assert active_slot["column_names"] == ["doctor_id", "appointment_date", "slot"]

    await asyncio.to_thread(command.downgrade, cfg, "base")
    assert table_names(db_path) <= {"alembic_version"}
