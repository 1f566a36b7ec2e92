"""Security utilities for password hashing, JWT tokens and route authorization."""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt
from fastapi import Depends, Request

from leaveflow.constants.constants import RoleName
from leaveflow.core.config import settings
from leaveflow.core.exceptions import Forbidden, Unauthenticated

logger = logging.getLogger(__name__)

PBKDF2_DIGEST = "sha512"
PBKDF2_KEY_LENGTH = 64


def generate_salt() -> str:
    return secrets.token_hex(16)


def hash_password(password: str, salt: Optional[str] = None) -> Tuple[str, str]:
    """
    Derive the stored hash for ``password``.

    Args:
        password (str): The plain text password.
        salt (Optional[str]): Hex salt. A fresh one is generated when omitted.

    Returns:
        Tuple[str, str]: The hex encoded PBKDF2-HMAC-SHA512 hash and the salt used.
    """
    salt = salt or generate_salt()
    derived = hashlib.pbkdf2_hmac(
        PBKDF2_DIGEST,
        password.encode("utf-8"),
        salt.encode("utf-8"),
        settings.PASSWORD_HASH_ITERATIONS,
        dklen=PBKDF2_KEY_LENGTH,
    )
    return derived.hex(), salt


def verify_password(password: str, salt: str, expected_hash: str) -> bool:
    candidate, _ = hash_password(password, salt)
    return hmac.compare_digest(candidate, expected_hash)


def create_jwt_token(data: dict, expires_delta: timedelta = None) -> str:
    """
    Creates a JWT (JSON Web Token) with the provided data and expiration time.

    Args:
        data (dict): The payload data to be encoded in the JWT.
        expires_delta (timedelta, optional): The time until the token expires.
            Defaults to ``ACCESS_TOKEN_EXPIRE_MINUTES``.

    Returns:
        str: The encoded JWT string.

    Example:
        >>> token = create_jwt_token({"userId": 7, "role": "manager"})

    Note:
        The token includes standard JWT claims:
        - exp (expiration time)
        - iat (issued at time)
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({
        "exp": now + expires_delta,
        "iat": now,
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> dict:
    """Decodes and validates a JWT token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or improperly formatted.
    """
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
    )


@dataclass(frozen=True)
class Principal:
    """The verified caller handed to route handlers by the authorization gate."""

    user_id: int
    role: RoleName


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def principal_from_token(token: Optional[str]) -> Principal:
    """Turn a raw bearer token into a ``Principal`` or raise ``Unauthenticated``."""
    if not token:
        raise Unauthenticated("Missing authentication token")
    try:
        payload = decode_jwt_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Invalid token")

    user_id = payload.get("userId")
    try:
        role = RoleName(payload.get("role"))
    except ValueError:
        raise Unauthenticated("Invalid token")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise Unauthenticated("Invalid token")
    return Principal(user_id=user_id, role=role)


def get_current_principal(request: Request) -> Principal:
    """
    Dependency that authenticates the bearer token.
    Raises 401 if not authenticated
    """
    principal = principal_from_token(bearer_token(request))
    request.state.user_id = principal.user_id
    return principal


def require_roles(*roles: RoleName):
    """
    Build a dependency that only lets callers with one of ``roles`` through.
    With no roles any authenticated caller is accepted.
    """
    allowed = frozenset(roles)

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if allowed and principal.role not in allowed:
            raise Forbidden("You do not have permission to perform this action")
        return principal

    return dependency


authenticated = require_roles()
employee_only = require_roles(RoleName.employee)
manager_only = require_roles(RoleName.manager)
admin_only = require_roles(RoleName.admin)
manager_or_admin = require_roles(RoleName.manager, RoleName.admin)
