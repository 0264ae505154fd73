from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import ValidationError

from classtest.auth import services
from classtest.auth.dependencies import get_current_user, get_optional_user
from classtest.auth.schemas import (
    AuthResponse,
    CurrentUser,
    CustomTokenRequest,
    StudentLoginRequest,
    TeacherCredentials,
    ViewResponse,
)
from classtest.core.exceptions import AuthFailed, ServiceError, to_http_exception
from classtest.db.session import get_store
from classtest.store.base import DocumentStore

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/anonymous", response_model=AuthResponse)
async def anonymous(store: DocumentStore = Depends(get_store)) -> AuthResponse:
    return await services.anonymous_sign_in(store)


@router.post("/token", response_model=AuthResponse)
async def custom_token(
    payload: CustomTokenRequest,
    store: DocumentStore = Depends(get_store),
) -> AuthResponse:
    try:
        return await services.token_sign_in(store, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post(
    "/teacher/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def teacher_signup(
    payload: TeacherCredentials,
    store: DocumentStore = Depends(get_store),
) -> AuthResponse:
    try:
        return await services.teacher_signup(store, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/teacher/login", response_model=AuthResponse)
async def teacher_login(
    payload: TeacherCredentials,
    store: DocumentStore = Depends(get_store),
) -> AuthResponse:
    try:
        return await services.teacher_login(store, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/teacher/login-oauth")
async def teacher_login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    store: DocumentStore = Depends(get_store),
):
    try:
        payload = TeacherCredentials(
            email=form_data.username.strip(),
            password=form_data.password,
        )
    except ValidationError:
        raise to_http_exception(AuthFailed())
    try:
        result = await services.teacher_login(store, payload)
    except ServiceError as e:
        raise to_http_exception(e)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.post("/student/login", response_model=AuthResponse)
async def student_login(
    payload: StudentLoginRequest,
    store: DocumentStore = Depends(get_store),
) -> AuthResponse:
    """Teacher code + personal code. A wrong code never says which one was wrong."""
    try:
        return await services.student_login(store, payload)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/session", response_model=ViewResponse)
async def session_view(current_user: CurrentUser = Depends(get_current_user)) -> ViewResponse:
    return services.current_view(current_user)


@router.post("/logout", response_model=ViewResponse)
async def logout(current_user: Optional[CurrentUser] = Depends(get_optional_user)) -> ViewResponse:
    return services.logout_view(current_user)
