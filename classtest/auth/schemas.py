from typing import Any, Dict, Optional

from pydantic import BaseModel, EmailStr, Field

from classtest.core.enums import UserRole


class TeacherCredentials(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


class CustomTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class StudentLoginRequest(BaseModel):
    # Blank codes are accepted here and fail like any other wrong code
    teacher_code: str = ""
    student_code: str = ""


class ViewResponse(BaseModel):
    view: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    uid: str
    role: UserRole
    tenant_id: Optional[str] = None
    teacher_code: Optional[str] = None
    student_id: Optional[str] = None
    view: ViewResponse


class CurrentUser(BaseModel):
    """Identity resolved from an access token."""

    uid: str
    role: UserRole
    email: str = ""
    # Set for approved teachers and logged-in students
    tenant_id: Optional[str] = None
    teacher_code: Optional[str] = None
    student_id: Optional[str] = None
