from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from classtest.auth.schemas import CurrentUser
from classtest.auth.security import decode_access_token
from classtest.core.enums import UserRole


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/teacher/login-oauth")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/teacher/login-oauth", auto_error=False)


def user_from_token(token: str) -> CurrentUser:
    """Decode an access token. Raises HTTP 401 when it is invalid."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    uid = payload.get("sub")
    role_name = payload.get("role")
    if not uid or not role_name:
        raise credentials_exception
    try:
        role = UserRole(role_name)
    except ValueError:
        raise credentials_exception

    return CurrentUser(
        uid=uid,
        role=role,
        email=payload.get("email") or "",
        tenant_id=payload.get("tenant_id"),
        teacher_code=payload.get("teacher_code"),
        student_id=payload.get("student_id"),
    )


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Resolve the authenticated identity from the bearer token."""
    return user_from_token(token)


async def get_optional_user(token: Optional[str] = Depends(optional_oauth2_scheme)) -> Optional[CurrentUser]:
    if not token:
        return None
    return user_from_token(token)
