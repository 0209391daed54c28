"""
Role gate: verifies identity tokens and the role they carry.

Every protected route depends on require_role(...), which reads the bearer
token and calls authorize(). The returned Identity is what services use for
per-row ownership checks (e.g. Order.supplier_id == identity.id).
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Optional, Union

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.errors import ForbiddenError, UnauthenticatedError
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    id: int
    role: str


def create_access_token(
    subject_id: Union[int, str],
    role: str,
    expires_delta: Optional[timedelta] = None,
    **extra_claims
) -> str:
    """
    Sign an identity token.

    Login flows live outside this service; this is used by the seed script
    and by tests to mint tokens in the same format.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    now = utcnow()
    claims = {
        "id": subject_id,
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
        **extra_claims,
    }
    if settings.jwt_issuer:
        claims["iss"] = settings.jwt_issuer

    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _role_claim(claims: dict) -> Optional[str]:
    # Staff tokens carry "category", supplier and passenger tokens carry "role"
    role = claims.get("role") or claims.get("category")
    return role.lower() if isinstance(role, str) else None


def _identity_id(raw) -> Optional[int]:
    # Every table is keyed by integer ids
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.isdigit():
        return int(raw)
    return None


def authorize(token: Optional[str], required_role: Union[str, Iterable[str]]) -> Identity:
    """
    Verify a token and check its role claim.

    Args:
        token: Raw bearer token (without the "Bearer " prefix)
        required_role: A role, or a collection of acceptable roles

    Returns:
        Identity of the caller

    Raises:
        UnauthenticatedError: token missing, malformed, badly signed or expired
        ForbiddenError: role claim does not match
    """
    if not token:
        raise UnauthenticatedError("No token provided")

    options = {"require": ["exp"]}
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected identity token: {str(e)}")
        raise UnauthenticatedError("Invalid or expired token")

    identity_id = _identity_id(claims.get("id"))
    if identity_id is None:
        raise UnauthenticatedError("Token does not identify a caller")

    if isinstance(required_role, str):
        accepted = {required_role.lower()}
    else:
        accepted = {r.lower() for r in required_role}

    role = _role_claim(claims)
    if role not in accepted:
        raise ForbiddenError(f"Access denied. {' or '.join(sorted(accepted)).capitalize()} role required.")

    return Identity(id=identity_id, role=role)


def require_role(*roles: str):
    """FastAPI dependency factory: the caller must hold one of `roles`"""

    def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> Identity:
        token = credentials.credentials if credentials else None
        return authorize(token, roles)

    return dependency
