"""
Shared authentication helpers.
Provides token creation, verification, and the request auth gate.
"""

import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Tuple, Optional, Callable, Any

import jwt
from flask import jsonify, request, current_app, g, Response

from backend.errors import ApiError, AuthenticationError, AuthorizationError, InternalError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEFAULT_TOKEN_LIFETIME = timedelta(days=1)

NO_TOKEN_MESSAGE = "Access denied. No token provided."
INVALID_TOKEN_MESSAGE = "Invalid token or token expired"
GATE_ERROR_MESSAGE = "Internal server error during authentication"


class TokenVerificationError(Exception):
    """Raised when a token is invalid or expired. The reason is not exposed."""


# --- JWT CREATION ---
def create_token(user_id: int, secret: str,
                 expires_in: timedelta = DEFAULT_TOKEN_LIFETIME,
                 now: Optional[datetime] = None) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (int): The unique ID of the user.
        secret (str): Signing secret.
        expires_in (timedelta): Token lifetime, one day by default.
        now (datetime, optional): Issue time; defaults to the current UTC time.

    Returns:
        str: Encoded JWT string.
    """
    if not secret:
        raise ValueError("JWT secret must not be empty")

    issued_at = now or datetime.now(timezone.utc)

    payload = {
        "id": user_id,
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }

    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


# --- JWT VALIDATION ---
def decode_token(token: str, secret: str) -> int:
    """
    Verify a JWT's signature and expiry and return the user id it carries.

    Raises:
        TokenVerificationError: For any bad signature, expiry, malformed
            token, or payload without an integer id.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as exc:
        logger.debug("Token rejected: expired")
        raise TokenVerificationError() from exc
    except jwt.InvalidTokenError as exc:
        logger.debug("Token rejected: %s", type(exc).__name__)
        raise TokenVerificationError() from exc

    user_id = payload.get("id")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        logger.debug("Token rejected: missing id claim")
        raise TokenVerificationError()

    return user_id


def token_lifetime() -> timedelta:
    """
    Token lifetime from the running app's config.
    """
    minutes = current_app.config.get("TOKEN_EXPIRATION_MINUTES")
    if not minutes:
        return DEFAULT_TOKEN_LIFETIME
    return timedelta(minutes=int(minutes))


def issue_token(user_id: int) -> str:
    """
    Create a token for user_id using the running app's secret and lifetime.
    """
    return create_token(user_id, current_app.config["JWT_SECRET"], token_lifetime())


def _bearer_value(header: Optional[str]) -> Optional[str]:
    # "Bearer <token>": the value is whatever follows the first whitespace run.
    if not header:
        return None
    parts = header.split()
    if len(parts) < 2:
        return None
    return parts[1]


def _reject(error: ApiError) -> Tuple[None, Response, int]:
    return None, jsonify(error.to_dict()), error.status_code


# --- AUTH GATE ---
def authenticate_request() -> Tuple[Optional[int], Optional[Response], Optional[int]]:
    """
    Verify the JWT in the Authorization header.

    Returns:
        tuple: (user_id, error_response, status_code)
               If successful, error_response and status_code are None.
               If failed, user_id is None and the status is 401 (no token),
               403 (invalid or expired token) or 500 (unexpected fault).
    """
    try:
        token = _bearer_value(request.headers.get("Authorization"))
        if not token:
            return _reject(AuthenticationError(NO_TOKEN_MESSAGE))

        try:
            user_id = decode_token(token, current_app.config["JWT_SECRET"])
        except TokenVerificationError:
            logger.info("Rejected token on %s %s", request.method, request.path)
            return _reject(AuthorizationError(INVALID_TOKEN_MESSAGE))

        return user_id, None, None
    except Exception:
        logger.exception("Auth middleware error")
        return _reject(InternalError(GATE_ERROR_MESSAGE))


def token_required(view: Callable) -> Callable:
    """
    Decorator for routes that need an authenticated user.

    Binds the caller's id to flask.g.user_id before the view runs, or returns
    the gate's rejection without calling the view.
    """

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any):
        user_id, err, code = authenticate_request()
        if err is not None:
            return err, code
        g.user_id = user_id
        return view(*args, **kwargs)

    return wrapper
