"""
Admin authentication: password hashing, session tokens and the request guard.

Tokens are itsdangerous timed signatures over ``{"id": <admin id>}``. They are
valid for seven days and are checked against the store on every request.
"""
import os
import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadData, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from database import get_store
from errors import ServerError, Unauthenticated

logger = logging.getLogger(__name__)

TOKEN_SALT = "admin-session"
TOKEN_MAX_AGE = 7 * 24 * 60 * 60
DEFAULT_HASH_METHOD = "pbkdf2:sha256:600000"

bearer_scheme = HTTPBearer(auto_error=False)


class InvalidToken(Exception):
    pass


# ------------------------------
# Credential verifier
# ------------------------------

def hash_password(password: str) -> str:
    method = os.getenv("PASSWORD_HASH_METHOD", DEFAULT_HASH_METHOD)
    return generate_password_hash(password, method=method)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # Unknown hash method in the stored value.
        return False


# ------------------------------
# Session tokens
# ------------------------------

def _serializer() -> URLSafeTimedSerializer:
    secret = os.getenv("SECRET_KEY")
    if not secret:
        raise RuntimeError("SECRET_KEY is not configured")
    return URLSafeTimedSerializer(secret, salt=TOKEN_SALT)


def issue_token(admin_id) -> str:
    return _serializer().dumps({"id": str(admin_id)})


def verify_token(token: str) -> str:
    """Return the admin id carried by ``token`` or raise InvalidToken."""
    try:
        data = _serializer().loads(token, max_age=TOKEN_MAX_AGE)
    except BadData as e:
        raise InvalidToken(str(e)) from e
    admin_id = data.get("id") if isinstance(data, dict) else None
    if not isinstance(admin_id, str):
        raise InvalidToken("token carries no admin id")
    return admin_id


# ------------------------------
# Auth guard
# ------------------------------

def serialize_admin(admin_doc):
    return {
        "id": str(admin_doc.get("_id")),
        "username": admin_doc.get("username"),
    }


def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store=Depends(get_store),
):
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    try:
        admin_id = verify_token(credentials.credentials)
    except InvalidToken as e:
        logger.info("Rejected admin token: %s", e)
        raise Unauthenticated()
    except RuntimeError as e:
        logger.error("Cannot verify admin token: %s", e)
        raise Unauthenticated()
    if store is None:
        raise ServerError()
    try:
        admin = store["admin"].find_one({"_id": ObjectId(admin_id)})
    except InvalidId as e:
        logger.info("Rejected admin token: %s", e)
        raise Unauthenticated()
    except Exception:
        logger.exception("Admin lookup failed")
        raise Unauthenticated()
    if not admin:
        raise Unauthenticated()
    return serialize_admin(admin)
