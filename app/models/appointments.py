"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from app.models.base import metadata

# Rows in these states do not hold their (employee_id, scheduled_date) slot
ACTIVE_SLOT_PREDICATE = "status NOT IN ('canceled', 'completed')"

appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True),
    # Wall-clock time exactly as booked; never converted between zones
    Column("scheduled_date", DateTime(timezone=False), nullable=False),
    Column("status", String(20), nullable=False, server_default=text("'pending'")),
    Column("notes", Text, nullable=True),
    # Write-once references
    Column("clinic_id", Uuid, ForeignKey("clinics.id"), nullable=False),
    Column("customer_id", Uuid, ForeignKey("customers.id"), nullable=False),
    Column("employee_id", Uuid, ForeignKey("employees.id"), nullable=False),
    Column("service_id", Uuid, ForeignKey("services.id"), nullable=False),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "status IN ('pending', 'process', 'completed', 'canceled')",
        name="appointments_status_check",
    ),
)

Index("idx_appointments_customer_id", appointments.c.customer_id)
Index("idx_appointments_clinic_scheduled", appointments.c.clinic_id, appointments.c.scheduled_date)
# The conflict probe is advisory; this index is what rules out double booking
Index(
    "uq_appointments_active_slot",
    appointments.c.employee_id,
    appointments.c.scheduled_date,
    unique=True,
    postgresql_where=text(ACTIVE_SLOT_PREDICATE),
    sqlite_where=text(ACTIVE_SLOT_PREDICATE),
)
