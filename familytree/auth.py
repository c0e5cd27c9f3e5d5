"""Editor accounts: bcrypt passwords, signed session cookies, request dependencies."""
import hashlib
import hmac
import logging
import os
import time
import uuid
from datetime import datetime, timezone

import bcrypt
import kuzu
from fastapi import Depends, HTTPException, Request

from .db import get_conn

logger = logging.getLogger(__name__)

COOKIE_SECRET = os.environ.get("COOKIE_SECRET", "")
SESSION_COOKIE = "session"
SESSION_MAX_AGE = int(os.environ.get("SESSION_MAX_AGE", 30 * 24 * 3600))

MIN_PASSWORD_CHARS = 8
MAX_PASSWORD_BYTES = 72  # bcrypt ignores anything past this

_USER_FIELDS = ("id", "email", "name", "password_hash", "created_at")
_USER_RETURN = ", ".join(f"u.{f}" for f in _USER_FIELDS)


# ── Passwords ──

def validate_password(password: str):
    if len(password) < MIN_PASSWORD_CHARS:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_CHARS} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password is too long (max {MAX_PASSWORD_BYTES} bytes)")


def hash_password(password: str) -> str:
    validate_password(password)
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        # malformed stored hash
        return False


# ── Session cookie ──

def _sign(payload: str) -> str:
    return hmac.new(COOKIE_SECRET.encode(), payload.encode(), hashlib.sha256).hexdigest()


def create_session_token(user_id: str) -> str:
    """Token format is ``<user_id>:<issued unix seconds>:<hex hmac>``."""
    payload = f"{user_id}:{int(time.time())}"
    return f"{payload}:{_sign(payload)}"


def verify_session_token(token: str | None) -> str | None:
    """User id carried by a genuine, unexpired token; None for anything else."""
    if not COOKIE_SECRET or not token or token.count(":") != 2:
        return None
    payload, sig = token.rsplit(":", 1)
    if not hmac.compare_digest(sig, _sign(payload)):
        return None
    user_id, issued = payload.split(":")
    if not issued.isdigit() or time.time() - int(issued) > SESSION_MAX_AGE:
        return None
    return user_id


# ── Accounts ──

def _find_user(conn: kuzu.Connection, field: str, value: str) -> dict | None:
    result = conn.execute(
        f"MATCH (u:User) WHERE u.{field} = $value RETURN {_USER_RETURN}",
        {"value": value},
    )
    if not result.has_next():
        return None
    return dict(zip(_USER_FIELDS, result.get_next()))


def _without_hash(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "password_hash"}


def get_user_by_email(conn: kuzu.Connection, email: str) -> dict | None:
    return _find_user(conn, "email", email.strip().lower())


def get_user_by_id(conn: kuzu.Connection, user_id: str) -> dict | None:
    return _find_user(conn, "id", user_id)


def create_user(conn: kuzu.Connection, email: str, name: str, password: str) -> dict:
    """Register an editor. Emails are unique case-insensitively."""
    email = email.strip().lower()
    if get_user_by_email(conn, email):
        raise ValueError("A user with this email already exists")
    user = {
        "id": str(uuid.uuid4()),
        "email": email,
        "name": name,
        "password_hash": hash_password(password),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    conn.execute(
        "CREATE (u:User {id: $id, email: $email, name: $name, "
        "password_hash: $password_hash, created_at: $created_at})",
        user,
    )
    logger.info("Registered user %s", user["id"])
    return _without_hash(user)


def authenticate_user(conn: kuzu.Connection, email: str, password: str) -> dict | None:
    user = get_user_by_email(conn, email)
    if user is None or not verify_password(password, user["password_hash"]):
        return None
    return _without_hash(user)


# ── FastAPI dependencies ──

def get_optional_user(request: Request, conn=Depends(get_conn)) -> dict | None:
    """Signed-in editor from the session cookie, or None."""
    user_id = verify_session_token(request.cookies.get(SESSION_COOKIE))
    user = get_user_by_id(conn, user_id) if user_id else None
    return _without_hash(user) if user else None


def get_current_user(request: Request, conn=Depends(get_conn)) -> dict:
    """Like get_optional_user, but 401 when nobody is signed in."""
    user = get_optional_user(request, conn)
    if user is None:
        raise HTTPException(401, "Unauthorized")
    return user
