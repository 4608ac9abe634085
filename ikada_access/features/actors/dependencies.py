"""
FastAPI dependencies for authentication.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from ikada_access.core.database.engine import get_db
from ikada_access.features.actors.models import Actor
from ikada_access.features.actors.auth import verify_jwt_token, actor_id_from_payload


security = HTTPBearer()


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Actor:
    """
    Get the authenticated actor from the bearer token.
    
    This dependency:
    1. Extracts the JWT from the Authorization header
    2. Verifies it against the shared identity-provider secret
    3. Looks the actor up in the local database
    
    Actors are provisioned by the identity provider; an id that is not known
    locally is rejected rather than created.
    """
    payload = verify_jwt_token(credentials.credentials)
    actor_id = actor_id_from_payload(payload)
    
    actor = await db.get(Actor, actor_id)
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown actor",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    if not actor.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Actor account is deactivated",
        )
    
    return actor
