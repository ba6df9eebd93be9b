"""Initial schema: patients, psychiatrists, appointments.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE = sa.text("status <> 'cancelled'")


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_patients_email"), "patients", ["email"], unique=True)

    op.create_table(
        "psychiatrists",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("expertise", sa.String(), nullable=True),
        sa.Column("bio", sa.String(), nullable=True),
        sa.Column("start_time", sa.String(), nullable=True, server_default="09:00"),
        sa.Column("end_time", sa.String(), nullable=True, server_default="17:00"),
        sa.Column("working_days", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_psychiatrists_email"), "psychiatrists", ["email"], unique=True)

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("psychiatrist_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("time_slot", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("notes", sa.String(), nullable=False, server_default=""),
        sa.Column("patient_name", sa.String(), nullable=False),
        sa.Column("patient_email", sa.String(), nullable=False),
        sa.Column("psychiatrist_name", sa.String(), nullable=False),
        sa.Column("psychiatrist_email", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"]),
        sa.ForeignKeyConstraint(["psychiatrist_id"], ["psychiatrists.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_appointments_patient_id"), "appointments", ["patient_id"], unique=False)
    op.create_index(op.f("ix_appointments_psychiatrist_id"), "appointments", ["psychiatrist_id"], unique=False)
    op.create_index(op.f("ix_appointments_date"), "appointments", ["date"], unique=False)
    op.create_index(op.f("ix_appointments_status"), "appointments", ["status"], unique=False)
    # At most one non-cancelled appointment per psychiatrist slot and per patient slot
    op.create_index(
        "uq_appointments_psychiatrist_slot_active",
        "appointments",
        ["psychiatrist_id", "date", "time_slot"],
        unique=True,
        postgresql_where=ACTIVE,
        sqlite_where=ACTIVE,
    )
    op.create_index(
        "uq_appointments_patient_slot_active",
        "appointments",
        ["patient_id", "date", "time_slot"],
        unique=True,
        postgresql_where=ACTIVE,
        sqlite_where=ACTIVE,
    )


def downgrade() -> None:
    op.drop_index("uq_appointments_patient_slot_active", table_name="appointments")
    op.drop_index("uq_appointments_psychiatrist_slot_active", table_name="appointments")
    op.drop_index(op.f("ix_appointments_status"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_date"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_psychiatrist_id"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_patient_id"), table_name="appointments")
    op.drop_table("appointments")
    op.drop_index(op.f("ix_psychiatrists_email"), table_name="psychiatrists")
    op.drop_table("psychiatrists")
    op.drop_index(op.f("ix_patients_email"), table_name="patients")
    op.drop_table("patients")
