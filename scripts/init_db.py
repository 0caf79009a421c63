"""Script to initialize the database, optionally with a demo clinic."""

import asyncio
import sys
from datetime import timedelta
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import insert

from app.core.security import create_access_token
from app.database import engine
from app.models import clinics, customers, employees, metadata, services

DEMO_TOKEN_TTL = timedelta(hours=8)


def demo_token(actor_id: UUID, role: str, clinic_id: UUID | None = None) -> str:
    """Access token for a seeded actor, signed like the auth service signs them."""
    claims = {"sub": str(actor_id), "role": role}
    if clinic_id is not None:
        claims["clinic_id"] = str(clinic_id)
    return create_access_token(claims, expires_delta=DEMO_TOKEN_TTL)


async def init_db(seed: bool = False) -> None:
    """Create all tables and, if asked, a clinic with one employee, service and customer."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        print("✓ Database initialized successfully!")

        if not seed:
            return

        clinic_id, employee_id, customer_id = uuid4(), uuid4(), uuid4()
        await conn.execute(
            insert(clinics).values(id=clinic_id, name="Demo Clinic", address="1 Main Street")
        )
        await conn.execute(
            insert(employees).values(
                id=employee_id, clinic_id=clinic_id, name="Dr. Demo", email="doctor@demo.test"
            )
        )
        await conn.execute(
            insert(services).values(
                id=uuid4(),
                clinic_id=clinic_id,
                name="General consultation",
                price=Decimal("30.00"),
                estimated_time=30,
            )
        )
        await conn.execute(
            insert(customers).values(id=customer_id, name="Demo Patient", email="patient@demo.test")
        )
        print(f"✓ Demo clinic created: {clinic_id}")
        print(f"  customer token: {demo_token(customer_id, 'customer')}")
        print(f"  employee token: {demo_token(employee_id, 'employee', clinic_id)}")


if __name__ == "__main__":
    asyncio.run(init_db(seed="--seed" in sys.argv))
