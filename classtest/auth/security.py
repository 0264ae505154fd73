from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from classtest.core.config import settings
from classtest.core.exceptions import ConfigMissing

CUSTOM_TOKEN_TYPE = "custom"
ACCESS_TOKEN_TYPE = "access"


def _secret() -> str:
    if not settings.jwt_secret_key:
        raise ConfigMissing(["JWT_SECRET_KEY"])
    return settings.jwt_secret_key


def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # In case the stored hash is invalid/corrupted
        return False


def _encode(claims: Dict[str, Any], expires_minutes: int) -> str:
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _secret(), algorithm=settings.jwt_algorithm)


def create_access_token(
    *, subject: Dict[str, Any], expires_minutes: Optional[int] = None
) -> str:
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    return _encode({**subject, "typ": ACCESS_TOKEN_TYPE}, expires_minutes)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Raises JWTError on a bad signature, expiry or wrong token type."""
    payload = jwt.decode(token, _secret(), algorithms=[settings.jwt_algorithm])
    if payload.get("typ") != ACCESS_TOKEN_TYPE:
        raise JWTError("Not an access token")
    return payload


def create_custom_token(uid: str, email: Optional[str] = None, expires_minutes: int = 60) -> str:
    """Sign-in token minted by a trusted backend for an existing identity."""
    claims: Dict[str, Any] = {"uid": uid, "typ": CUSTOM_TOKEN_TYPE}
    if email:
        claims["email"] = email
    return _encode(claims, expires_minutes)


def decode_custom_token(token: str) -> Dict[str, Any]:
    payload = jwt.decode(token, _secret(), algorithms=[settings.jwt_algorithm])
    if payload.get("typ") != CUSTOM_TOKEN_TYPE or not payload.get("uid"):
        raise JWTError("Not a custom sign-in token")
    return payload
