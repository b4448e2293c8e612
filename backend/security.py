"""
Password hashing, session tokens and the auth dependencies used by the routes.

Tokens are HS256 JWTs carrying the user id and role claims (``is_admin``,
``account_type``). Every protected route resolves the bearer token through
``get_current_user``; role checks read the verified claims and the freshly
loaded user row, never a client-supplied flag.
"""
import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from database import get_db
import models

logger = logging.getLogger(__name__)

JWT_SECRET           = os.environ.get("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM        = os.environ.get("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_MINUTES = int(os.environ.get("ACCESS_TOKEN_MINUTES", str(60 * 24)))
BCRYPT_ROUNDS        = 10


# ── Passwords ─────────────────────────────────────────────────────────────────

def hash_password(plain_password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# ── Tokens ────────────────────────────────────────────────────────────────────

def create_access_token(user: models.User) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub":          str(user.id),
        "email":        user.email,
        "account_type": user.account_type,
        "is_admin":     bool(user.is_admin),
        "iat":          int(now.timestamp()),
        "exp":          int((now + timedelta(minutes=ACCESS_TOKEN_MINUTES)).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Return the verified claims or raise 401."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session expired, please log in again")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid session token")


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Not authenticated")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return token.strip()


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------

def get_token_claims(authorization: Optional[str] = Header(None)) -> dict:
    return decode_access_token(_bearer_token(authorization))


def get_current_user(
    claims: dict = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> models.User:
    """Any logged-in user."""
    try:
        user_id = int(claims.get("sub", ""))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid session token")
    user = db.get(models.User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Account no longer exists")
    return user


def require_organizer(user: models.User = Depends(get_current_user)) -> models.User:
    """Organizer accounts only, used for event creation."""
    if user.account_type != "organizer":
        raise HTTPException(status_code=403, detail="Only organizers can perform this action")
    return user


def require_admin(
    claims: dict = Depends(get_token_claims),
    user: models.User = Depends(get_current_user),
) -> models.User:
    """Admin access. A token minted before revocation stops working once the row says otherwise."""
    if not claims.get("is_admin") or not user.is_admin:
        logger.warning("Non-admin user %s attempted an admin action", user.id)
        raise HTTPException(status_code=403, detail="Unauthorized")
    return user
