"""Credential store access and session tokens.

Passwords are hashed with werkzeug's salted hash; sessions are stateless
HS256 JWTs that carry the user id and username and expire after
``SESSION_EXPIRATION_MINUTES``.
"""
import datetime
import logging

import jwt
from pymongo.errors import DuplicateKeyError
from werkzeug.security import check_password_hash, generate_password_hash

import config
from errors import (
    DuplicateUsername,
    ExpiredToken,
    InvalidCredentials,
    InvalidToken,
    MissingToken,
)

logger = logging.getLogger(__name__)

ROLES = ("user", "admin")


def issue_token(user_id, username, now=None):
    now = now or datetime.datetime.now(datetime.timezone.utc)
    # the token itself is the session state, nothing is stored server side
    token_data = {
        "id": str(user_id),
        "username": username,
        "iat": now,
        "exp": now + datetime.timedelta(minutes=config.SESSION_EXPIRATION_MINUTES),
    }
    return jwt.encode(token_data, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify(token):
    """Return ``{"id", "username"}`` for a valid token or raise an AuthError."""
    if not token:
        raise MissingToken()

    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise ExpiredToken()
    except jwt.InvalidTokenError:
        raise InvalidToken()

    if "id" not in payload or "username" not in payload:
        raise InvalidToken()

    return {"id": payload["id"], "username": payload["username"]}


def create_user(users, username, password, email=None, role="user"):
    if role not in ROLES:
        raise ValueError(f"role must be one of {ROLES}")

    # Check if user already exists
    if users.find_one({"username": username}):
        raise DuplicateUsername()

    user_doc = {
        "username": username,
        "password_hash": generate_password_hash(password),
        "email": email or "",
        "role": role,
    }

    # the unique index still catches a concurrent signup with the same name
    try:
        result = users.insert_one(user_doc)
    except DuplicateKeyError:
        raise DuplicateUsername()

    user_doc["_id"] = result.inserted_id
    return user_doc


def register(users, username, password, email=None):
    user = create_user(users, username, password, email=email)
    logger.info("User created: %s (%s)", username, user["_id"])
    return issue_token(user["_id"], username)


def authenticate(users, username, password):
    user = users.find_one({"username": username})

    if not user or not check_password_hash(user["password_hash"], password):
        logger.warning("Failed login for username %r", username)
        raise InvalidCredentials()

    return issue_token(user["_id"], user["username"])
