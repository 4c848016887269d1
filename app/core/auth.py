"""
Authentication and role resolution.

The front-ends sign in with supabase.auth.signInWithPassword() and send the
JWT in the Authorization header. This module verifies the JWT, then resolves
the caller's role from their `profiles` row. Roles are cached per user for
ROLE_CACHE_TTL_SECONDS and dropped with `invalidate_role()` when an admin
changes them.
"""
import logging
import threading
import time
from typing import Dict, Optional, Tuple

import requests
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import settings
from app.core.errors import Forbidden, InternalError, Unauthorized
from app.core.lifecycle import normalize_role
from app.models.profile import Profile

logger = logging.getLogger(__name__)

# Security scheme for Bearer token; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


class User:
    """User extracted from JWT token."""
    def __init__(self, user_id: str, email: Optional[str] = None):
        self.id = user_id
        self.email = email


class Principal:
    """Authenticated caller with the role resolved from their profile."""
    def __init__(self, user_id: str, role: str, email: Optional[str] = None):
        self.id = user_id
        self.role = role
        self.email = email

    def __repr__(self) -> str:
        return f"Principal(id={self.id!r}, role={self.role!r})"


# Cache for JWKS keys (to avoid fetching on every request)
_jwks_cache = None


def get_supabase_jwks():
    """
    Fetch Supabase's JSON Web Key Set (JWKS) for JWT verification.

    Returns:
        dict: JWKS containing public keys for token verification
    """
    global _jwks_cache

    if _jwks_cache is not None:
        return _jwks_cache

    try:
        jwks_url = f"{settings.SUPABASE_URL}/auth/v1/.well-known/jwks.json"
        response = requests.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        return _jwks_cache
    except requests.RequestException as e:
        logger.exception("Failed to fetch JWKS from %s", settings.SUPABASE_URL)
        raise InternalError(f"Failed to fetch JWKS from Supabase: {str(e)}")


def verify_token(token: str) -> dict:
    """
    Verify a Supabase JWT and return the decoded payload.

    Newer Supabase projects sign with ES256/RS256 (checked against the JWKS),
    older ones with HS256 and the project's JWT secret.

    Raises:
        Unauthorized: If token is invalid or expired
    """
    try:
        header = jwt.get_unverified_header(token)
        if header.get("alg") == "HS256":
            key, algorithms = settings.SUPABASE_JWT_SECRET, ["HS256"]
        else:
            key, algorithms = get_supabase_jwks(), ["ES256", "RS256"]

        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience="authenticated",  # Supabase uses "authenticated" as audience
            options={"verify_aud": True},
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except JWTError as e:
        raise Unauthorized(f"Invalid authentication credentials: {str(e)}")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    FastAPI dependency returning the authenticated user from the bearer token.

    Raises:
        Unauthorized: If token is missing, invalid, or expired
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authenticated")

    payload = verify_token(credentials.credentials)

    # Supabase JWT structure: {"sub": "user_id", "email": "user@example.com", ...}
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Could not validate user")

    return User(user_id=user_id, email=payload.get("email"))


# --- Role cache: user_id -> (role, expires_at) ---

_role_cache: Dict[str, Tuple[str, float]] = {}
_role_cache_lock = threading.Lock()


def invalidate_role(user_id: Optional[str] = None) -> None:
    """Drop one cached role, or all of them when no user id is given."""
    with _role_cache_lock:
        if user_id is None:
            _role_cache.clear()
        else:
            _role_cache.pop(user_id, None)


def resolve_role(db: Session, user_id: str) -> Optional[str]:
    now = time.monotonic()
    with _role_cache_lock:
        cached = _role_cache.get(user_id)
        if cached and cached[1] > now:
            return cached[0]

    try:
        profile = db.query(Profile).filter(Profile.id == user_id).first()
    except SQLAlchemyError as e:
        raise InternalError(str(e))

    if not profile:
        logger.warning("Profile not found for user %s", user_id)
        return None

    role = normalize_role(profile.role)
    with _role_cache_lock:
        _role_cache[user_id] = (role, now + settings.ROLE_CACHE_TTL_SECONDS)
    return role


def get_principal(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Principal:
    role = resolve_role(db, current_user.id)
    if role is None:
        raise Forbidden("User profile not found")
    return Principal(user_id=current_user.id, role=role, email=current_user.email)


def require_roles(*roles: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.patch("/{ticket_id}")
        def update_ticket(
            ticket_id: str,
            principal: Principal = Depends(require_roles("admin", "manager")),
        ):
            ...
    """
    allowed = tuple(roles)

    def role_checker(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in allowed:
            raise Forbidden(
                f"Access denied. You have role '{principal.role}', "
                f"but need one of: [{', '.join(allowed)}]"
            )
        return principal
    return role_checker
