import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import List, Optional, Union

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from jobly import config
from jobly.errors import UnauthorizedError

logger = logging.getLogger(__name__)

TOKEN_FIELD = "_token"

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """Verified requester decoded from a signed token."""

    username: str
    is_admin: bool = False


class Unauthenticated:
    """No valid token came with the request."""

    def __repr__(self) -> str:
        return "UNAUTHENTICATED"


UNAUTHENTICATED = Unauthenticated()

AuthResult = Union[Identity, Unauthenticated]


@lru_cache(maxsize=None)
def _pwd_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    """Hash a plaintext password."""
    return _pwd_context(config.bcrypt_work_factor()).hash(password)


# PUBLIC_INTERFACE
def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    return _pwd_context(config.bcrypt_work_factor()).verify(password, password_hash)


# PUBLIC_INTERFACE
def create_access_token(username: str, is_admin: bool, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT carrying the username and admin flag."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.jwt_expires_minutes())
    payload = {
        "sub": username,
        "username": username,
        "is_admin": bool(is_admin),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, config.secret_key(), algorithm=config.jwt_algorithm())


# PUBLIC_INTERFACE
def decode_access_token(token: str) -> Identity:
    """Verify ``token`` and return its identity. Raises JWTError or ValueError."""
    payload = jwt.decode(token, config.secret_key(), algorithms=[config.jwt_algorithm()])
    username = payload.get("username") or payload.get("sub")
    if not username or not isinstance(username, str):
        raise ValueError("Invalid token payload")
    return Identity(username=username, is_admin=bool(payload.get("is_admin", False)))


async def _tokens_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> List[str]:
    tokens: List[str] = []
    if credentials is not None:
        tokens.append(credentials.credentials)

    body = await request.body()
    if body:
        try:
            data = json.loads(body)
        except ValueError:
            data = None
        if isinstance(data, dict) and isinstance(data.get(TOKEN_FIELD), str):
            tokens.append(data[TOKEN_FIELD])

    query_token = request.query_params.get(TOKEN_FIELD)
    if query_token:
        tokens.append(query_token)
    return [t for t in tokens if t]


# PUBLIC_INTERFACE
async def authenticate_jwt(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> AuthResult:
    """
    Dependency that resolves the requester, if any.

    Tokens are tried from the bearer header, then the ``_token`` body
    field, then the ``_token`` query parameter; the first one that
    verifies wins. No verifiable token yields ``UNAUTHENTICATED``; this
    step never rejects a request.
    """
    for token in await _tokens_from_request(request, credentials):
        try:
            return decode_access_token(token)
        except (JWTError, ValueError) as exc:
            logger.debug("Ignoring unverifiable token: %s", exc)
    return UNAUTHENTICATED


# PUBLIC_INTERFACE
def ensure_logged_in(auth: AuthResult = Depends(authenticate_jwt)) -> Identity:
    """Dependency that requires a verified identity."""
    if not isinstance(auth, Identity):
        raise UnauthorizedError()
    return auth


# PUBLIC_INTERFACE
def ensure_admin(auth: AuthResult = Depends(authenticate_jwt)) -> Identity:
    """Dependency that requires a verified admin identity."""
    if not isinstance(auth, Identity) or not auth.is_admin:
        raise UnauthorizedError()
    return auth


# PUBLIC_INTERFACE
def ensure_correct_user(username: str, auth: AuthResult = Depends(authenticate_jwt)) -> Identity:
    """Dependency that requires the ``username`` path user, or an admin."""
    if not isinstance(auth, Identity):
        raise UnauthorizedError()
    if auth.username != username and not auth.is_admin:
        raise UnauthorizedError()
    return auth
