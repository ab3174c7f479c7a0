"""
Authentication and authorization utilities for the storefront service.

Bearer tokens are issued by the external auth provider. They are verified
locally when the provider's JWT secret is configured, otherwise the provider
is asked who the token belongs to.
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from . import config, crud
from .clients.auth_provider import AuthProviderClient, AuthProviderError, get_auth_provider
from .kv_store import KVStore, get_kv

logger = logging.getLogger(__name__)

# Hashing context for password reset codes
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Missing credentials are reported as 401 by get_current_user, not by the scheme
security = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Current authenticated user information."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    token: str


def hash_reset_code(code: str) -> str:
    """Hash a password reset code for storage."""
    return pwd_context.hash(code)


def verify_reset_code(code: str, code_hash: str) -> bool:
    return pwd_context.verify(code, code_hash)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> CurrentUser:
    """
    Verify a provider-issued JWT locally.

    Raises:
        JWTError: If the signature, expiry or audience is invalid
        ValueError: If the token carries no subject
    """
    payload = jwt.decode(
        token,
        config.AUTH_JWT_SECRET,
        algorithms=[config.AUTH_JWT_ALGORITHM],
        audience=config.AUTH_JWT_AUDIENCE,
    )
    user_id = payload.get("sub")
    if not user_id:
        raise ValueError("No 'sub' claim in token")
    metadata = payload.get("user_metadata") or {}
    return CurrentUser(id=user_id, email=payload.get("email"), name=metadata.get("name"), token=token)


async def resolve_token(token: str, provider: AuthProviderClient) -> CurrentUser:
    """
    Resolve a bearer token to the user it identifies.

    Raises:
        HTTPException: 401 if the token is invalid
    """
    if config.AUTH_JWT_SECRET:
        try:
            return decode_token(token)
        except (JWTError, ValueError) as e:
            logger.error(f"JWT validation error: {e}")
            raise _credentials_exception()

    try:
        user = await provider.get_user(token)
    except AuthProviderError as e:
        logger.error(f"Token rejected by auth provider: {e.message}")
        raise _credentials_exception()

    if not user or not user.get("id"):
        raise _credentials_exception()
    metadata = user.get("user_metadata") or {}
    return CurrentUser(id=user["id"], email=user.get("email"), name=metadata.get("name"), token=token)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    provider: AuthProviderClient = Depends(get_auth_provider),
) -> CurrentUser:
    """
    FastAPI dependency to get the current authenticated user from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise _credentials_exception()
    return await resolve_token(credentials.credentials, provider)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    provider: AuthProviderClient = Depends(get_auth_provider),
) -> Optional[CurrentUser]:
    """Like get_current_user, but anonymous or invalid tokens yield None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await resolve_token(credentials.credentials, provider)
    except HTTPException:
        return None


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
    kv: KVStore = Depends(get_kv),
) -> CurrentUser:
    """
    FastAPI dependency to require the administrator flag.

    Raises:
        HTTPException: 403 if the user is not an administrator
    """
    if not await crud.is_admin(kv, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden - Admin access required",
        )
    return current_user
