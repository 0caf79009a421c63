"""FastAPI dependencies."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import decode_access_token
from app.database import get_db
from app.schemas.actors import Actor, ActorRole

# Security
security = HTTPBearer(auto_error=False)


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def actor_from_claims(payload: dict[str, Any]) -> Actor:
    """
    Build the actor from verified token claims.

    Args:
        payload: Decoded access token (``sub``, ``role``, optional ``clinic_id``)

    Returns:
        Actor for the request

    Raises:
        HTTPException: If a claim is missing or malformed
    """
    subject = payload.get("sub")
    if subject is None or not isinstance(subject, str):
        raise _credentials_error()

    try:
        actor_id = UUID(subject)
    except ValueError:
        raise _credentials_error("Invalid user ID format")

    try:
        role = ActorRole(payload.get("role"))
    except ValueError:
        raise _credentials_error("Invalid role claim")

    # An employee token without clinic is kept as-is; the policy rejects it
    clinic_claim = payload.get("clinic_id")
    try:
        clinic_id = UUID(str(clinic_claim)) if clinic_claim else None
    except ValueError:
        raise _credentials_error("Invalid clinic claim")

    return Actor(
        actor_id=actor_id,
        role=role,
        clinic_id=clinic_id if role == ActorRole.EMPLOYEE else None,
    )


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Actor:
    """
    Resolve the bearer token into the acting customer or employee.

    Raises:
        HTTPException: If token is invalid or expired
    """
    if credentials is None:
        raise _credentials_error("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _credentials_error()
    return actor_from_claims(payload)


def get_cache_manager() -> CacheManager:
    """Get cache manager bound to the shared Redis client."""
    return CacheManager(get_redis_client())


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
CacheManagerDep = Annotated[CacheManager, Depends(get_cache_manager)]
