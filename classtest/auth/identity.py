"""
Identity issuance: anonymous, custom token, and email + password.

Accounts live in the private accounts collection keyed by lower-cased email,
with a bcrypt password hash. A store outage during authentication becomes
AuthNetworkBlocked so the client can show the network remediation screen.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from fastapi import status
from jose import JWTError

from classtest.auth.security import decode_custom_token, hash_password, verify_password
from classtest.core.documents import AccountDocument
from classtest.core.exceptions import AuthFailed, AuthNetworkBlocked, ServiceError
from classtest.core.paths import paths
from classtest.store.base import DocumentStore, StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    uid: str
    email: str = ""
    is_anonymous: bool = True


@asynccontextmanager
async def network_guard() -> AsyncIterator[None]:
    try:
        yield
    except StoreUnavailable as e:
        logger.error("Authentication could not reach the store: %s", e.detail)
        raise AuthNetworkBlocked(e.detail) from e


def _new_uid() -> str:
    return uuid.uuid4().hex


class IdentityService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def sign_in_anonymously(self) -> Identity:
        return Identity(uid=_new_uid())

    async def sign_in_with_token(self, token: str) -> Identity:
        try:
            claims = decode_custom_token(token)
        except JWTError as e:
            raise AuthFailed("Invalid sign-in token") from e
        return Identity(uid=claims["uid"], email=claims.get("email", ""), is_anonymous=False)

    async def sign_up_with_password(self, email: str, password: str) -> Identity:
        email = email.strip()
        async with network_guard():
            existing = await self.store.get(paths.account(email))
            if existing is not None:
                raise ServiceError("Email is already in use", status.HTTP_409_CONFLICT)
            account = AccountDocument(
                uid=_new_uid(),
                email=email,
                password_hash=hash_password(password),
                created_at=int(time.time() * 1000),
            )
            await self.store.set(paths.account(email), account.to_document())
        return Identity(uid=account.uid, email=account.email, is_anonymous=False)

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        async with network_guard():
            raw = await self.store.get(paths.account(email))
        if raw is None:
            raise AuthFailed()
        account = AccountDocument.model_validate(raw)
        if not verify_password(password, account.password_hash):
            raise AuthFailed()
        return Identity(uid=account.uid, email=account.email, is_anonymous=False)
