"""
Bearer token verification.

Tokens are issued by the external identity provider and signed with a shared
secret. This service never issues tokens; it only verifies them and reads the
actor id claim.
"""
import jwt
from fastapi import HTTPException, status

from ikada_access.core import config


def verify_jwt_token(token: str) -> dict:
    """
    Verify a bearer token and return its payload.
    
    Args:
        token: JWT token from Authorization header
        
    Returns:
        Decoded JWT payload
        
    Raises:
        HTTPException: 401 if the token is invalid, expired, or verification is not configured
    """
    if not config.JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token verification is not configured",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            options={"verify_exp": True},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def actor_id_from_payload(payload: dict) -> str:
    """Read the actor id claim, raising 401 if it is missing."""
    actor_id = payload.get(config.JWT_ACTOR_CLAIM)
    if not actor_id or not isinstance(actor_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor_id
