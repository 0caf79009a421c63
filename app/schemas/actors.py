"""Authenticated actor schemas."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ActorRole(str, Enum):
    """Role of the authenticated caller."""

    CUSTOMER = "customer"
    EMPLOYEE = "employee"


class Actor(BaseModel):
    """Already-verified identity performing an operation."""

    model_config = ConfigDict(frozen=True)

    actor_id: UUID
    role: ActorRole
    clinic_id: UUID | None = None

    @property
    def is_customer(self) -> bool:
        return self.role == ActorRole.CUSTOMER

    @property
    def is_employee(self) -> bool:
        return self.role == ActorRole.EMPLOYEE
