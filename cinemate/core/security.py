from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt

from ..config import get_settings


def decode_identity_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    return jwt.decode(
        token,
        settings.identity_jwt_key,
        algorithms=[settings.identity_jwt_algorithm],
        options={"verify_aud": False},
    )


def create_access_token(data: Dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Issue a token the way the identity provider does; used by tests and local tooling."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.identity_jwt_key, algorithm=settings.identity_jwt_algorithm)
