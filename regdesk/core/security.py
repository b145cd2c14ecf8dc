"""Bearer token helpers and the authentication dependencies."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from regdesk.core.config import Settings
from regdesk.core.errors import AuthenticationError, ForbiddenError
from regdesk.interfaces.http.deps import get_account_service, get_app_settings
from regdesk.modules.accounts.models import AdminProfile
from regdesk.modules.accounts.service import AccountService
from regdesk.schemas import TokenData

security = HTTPBearer(auto_error=False)


def create_access_token(
    settings: Settings,
    account_id: str,
    username: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire_delta = expires_delta or timedelta(minutes=settings.security.access_token_expire_minutes)
    payload = {
        "sub": account_id,
        "username": username,
        "role": role,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.security.secret_key, algorithm=settings.security.algorithm)


def decode_access_token(settings: Settings, token: str) -> TokenData:
    try:
        payload = jwt.decode(token, settings.security.secret_key, algorithms=[settings.security.algorithm])
    except JWTError as exc:
        raise AuthenticationError() from exc

    account_id = payload.get("sub")
    username = payload.get("username")
    role = payload.get("role")
    if not all([account_id, username, role]):
        raise AuthenticationError()
    return TokenData(account_id=account_id, username=username, role=role)


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_app_settings),
    service: AccountService = Depends(get_account_service),
) -> AdminProfile:
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    token_data = decode_access_token(settings, credentials.credentials)
    user = await service.get_by_id(token_data.account_id)
    if user is None or not user.is_active():
        raise AuthenticationError("Account does not exist or is disabled")
    return user.to_profile()


async def get_current_admin(account: AdminProfile = Depends(get_current_account)) -> AdminProfile:
    if not account.is_admin():
        raise ForbiddenError("Administrator privileges required")
    return account


__all__ = [
    "create_access_token",
    "decode_access_token",
    "get_current_account",
    "get_current_admin",
]
