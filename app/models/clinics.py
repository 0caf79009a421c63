"""Clinic table model using SQLAlchemy Core.

Clinics are managed elsewhere; the booking engine only reads them.
"""

from sqlalchemy import Boolean, Column, DateTime, String, Table, Text, Uuid, func, text

from app.models.base import metadata

clinics = Table(
    "clinics",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("name", String(255), nullable=False, index=True),
    Column("address", Text),
    Column("phone", String(20)),
    Column("email", String(255)),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
