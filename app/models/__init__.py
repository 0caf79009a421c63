"""Database models."""

from app.models.appointments import appointments
from app.models.base import metadata
from app.models.clinics import clinics
from app.models.customers import customers
from app.models.employees import employees
from app.models.services import services

__all__ = [
    "appointments",
    "clinics",
    "customers",
    "employees",
    "metadata",
    "services",
]
