"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-01-15 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_ONLY = sa.text("status <> 'Cancelled'")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("details", sa.String(length=2000), nullable=True),
        sa.Column("timestamp", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_audit_logs")),
    )
    op.create_index(op.f("ix_audit_logs_user_id"), "audit_logs", ["user_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("role", sa.String(length=20), server_default="patient", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("email = lower(email)", name=op.f("ck_users_email_lowercase")),
        sa.CheckConstraint(
            "role IN ('patient', 'doctor', 'admin')", name=op.f("ck_users_role_valid")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_active_role", "users", ["is_active", "role"])

    op.create_table(
        "patients",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=10), nullable=True),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("medical_history", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "gender IS NULL OR gender IN ('Male', 'Female')", name=op.f("ck_patients_gender_valid")
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_patients_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_patients")),
        sa.UniqueConstraint("user_id", name=op.f("uq_patients_user_id")),
    )

    op.create_table(
        "medical_staff",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("department", sa.String(length=50), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_medical_staff_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_medical_staff")),
        sa.UniqueConstraint("user_id", name=op.f("uq_medical_staff_user_id")),
    )
    op.create_index("ix_medical_staff_department", "medical_staff", ["department"])

    op.create_table(
        "work_schedules",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["doctor_id"],
            ["medical_staff.id"],
            name=op.f("fk_work_schedules_doctor_id_medical_staff"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_work_schedules")),
        sa.UniqueConstraint("doctor_id", name=op.f("uq_work_schedules_doctor_id")),
    )

    op.create_table(
        "work_schedule_slots",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("schedule_id", sa.Uuid(), nullable=False),
        sa.Column("day", sa.String(length=9), nullable=False),
        sa.Column("day_index", sa.Integer(), nullable=False),
        sa.Column("slot", sa.String(length=5), nullable=False),
        sa.ForeignKeyConstraint(
            ["schedule_id"],
            ["work_schedules.id"],
            name=op.f("fk_work_schedule_slots_schedule_id_work_schedules"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_work_schedule_slots")),
        sa.UniqueConstraint("schedule_id", "day", "slot", name="uq_schedule_day_slot"),
    )
    op.create_index(
        "ix_schedule_slot_lookup", "work_schedule_slots", ["schedule_id", "day_index", "slot"]
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=False),
        sa.Column("department", sa.String(length=50), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("slot", sa.String(length=5), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="Pending", nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Pending', 'Confirmed', 'Cancelled', 'Completed')",
            name=op.f("ck_appointments_status_valid"),
        ),
        sa.ForeignKeyConstraint(
            ["doctor_id"],
            ["medical_staff.id"],
            name=op.f("fk_appointments_doctor_id_medical_staff"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["patients.id"],
            name=op.f("fk_appointments_patient_id_patients"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_appointments")),
    )
    op.create_index(
        "uq_appt_doctor_date_slot_active",
        "appointments",
        ["doctor_id", "appointment_date", "slot"],
        unique=True,
        postgresql_where=ACTIVE_ONLY,
        sqlite_where=ACTIVE_ONLY,
    )
    op.create_index("ix_appt_patient_date", "appointments", ["patient_id", "appointment_date"])
    op.create_index("ix_appt_doctor_date", "appointments", ["doctor_id", "appointment_date"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("appointment_id", sa.Uuid(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("method", sa.String(length=20), server_default="mobile_money", nullable=False),
        sa.Column("status", sa.String(length=20), server_default="Pending", nullable=False),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name=op.f("ck_bookings_amount_positive")),
        sa.CheckConstraint(
            "method IN ('card', 'mobile_money')", name=op.f("ck_bookings_method_valid")
        ),
        sa.CheckConstraint(
            "status IN ('Pending', 'Paid', 'Failed')", name=op.f("ck_bookings_status_valid")
        ),
        sa.ForeignKeyConstraint(
            ["appointment_id"],
            ["appointments.id"],
            name=op.f("fk_bookings_appointment_id_appointments"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_bookings")),
        sa.UniqueConstraint("appointment_id", name=op.f("uq_bookings_appointment_id")),
    )

    op.create_table(
        "doctor_notes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("appointment_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("medicines", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["appointment_id"],
            ["appointments.id"],
            name=op.f("fk_doctor_notes_appointment_id_appointments"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["doctor_id"],
            ["medical_staff.id"],
            name=op.f("fk_doctor_notes_doctor_id_medical_staff"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["patient_id"],
            ["patients.id"],
            name=op.f("fk_doctor_notes_patient_id_patients"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_doctor_notes")),
    )
    op.create_index("ix_doctor_notes_appointment", "doctor_notes", ["appointment_id"])
    op.create_index("ix_doctor_notes_doctor", "doctor_notes", ["doctor_id"])


def downgrade() -> None:
    op.drop_table("doctor_notes")
    op.drop_table("bookings")
    op.drop_index("ix_appt_doctor_date", table_name="appointments")
    op.drop_index("ix_appt_patient_date", table_name="appointments")
    op.drop_index("uq_appt_doctor_date_slot_active", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("work_schedule_slots")
    op.drop_table("work_schedules")
    op.drop_table("medical_staff")
    op.drop_table("patients")
    op.drop_table("users")
    op.drop_table("audit_logs")
