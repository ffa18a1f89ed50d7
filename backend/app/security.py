"""
Postboard Backend: Password Hashing and JWT Helpers
=====================================================

What:  bcrypt password hashing (passlib) and HS256 access tokens (python-jose).
How:   A module-level CryptContext configured from settings; tokens carry the
       user id in `sub` plus `email`, `iat` and `exp` claims.
Who:   The users schema save hook (hashing), AuthService (tokens) and the
       current-user dependency (decoding).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import AuthenticationError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognizable hash
        return False


def create_access_token(
    subject: Any,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token for `subject` (stored as a string in `sub`)."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expires_minutes))
    payload: Dict[str, Any] = dict(claims or {})
    payload.update({"sub": str(subject), "iat": now, "exp": expire})
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raise AuthenticationError otherwise."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Token has expired") from exc
    except JWTError as exc:
        raise AuthenticationError("Invalid authentication token") from exc
    if payload.get("sub") is None:
        raise AuthenticationError("Invalid authentication token")
    return payload
