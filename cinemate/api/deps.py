from typing import Annotated
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session
from ..core.constants import ADMIN_ROLE
from ..core.security import decode_identity_token
from ..db.session import get_db
from ..db.models import User
from ..events import EventBus


bearer_scheme = HTTPBearer(auto_error=False)


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )
    if credentials is None:
        raise credentials_exception
    try:
        payload = decode_identity_token(credentials.credentials)
    except JWTError as exc:
        raise credentials_exception from exc
    if payload.get("sub") is None:
        raise credentials_exception
    return payload


def get_current_user(
    claims: Annotated[dict, Depends(get_token_claims)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    user = db.get(User, claims["sub"])
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    return user


def require_admin(claims: Annotated[dict, Depends(get_token_claims)]) -> dict:
    if claims.get("role") != ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return claims


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus
