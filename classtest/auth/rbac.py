from fastapi import Depends, HTTPException, status

from classtest.auth.dependencies import get_current_user
from classtest.auth.schemas import CurrentUser
from classtest.core.enums import UserRole


async def require_teacher(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require an approved teacher. Pending teachers have no tenant yet."""
    if current_user.role != UserRole.TEACHER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only teachers can perform this action",
        )
    if not current_user.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Teacher account is awaiting approval",
        )
    return current_user


async def require_student(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if current_user.role != UserRole.STUDENT or not current_user.tenant_id or not current_user.student_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only students can perform this action",
        )
    return current_user


async def require_tenant_member(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Approved teacher or logged-in student: anyone bound to a tenant."""
    if current_user.role not in (UserRole.TEACHER, UserRole.STUDENT) or not current_user.tenant_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Log in with a teacher or student account",
        )
    return current_user
