"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login
- Profile retrieval (/me)

Token logic lives in `auth_service.utils`, hashing in `auth_service.passwords`.
"""

import logging
from typing import Tuple, Dict, Any

import psycopg2.errors
from flask import Blueprint, request, jsonify, g, Response

from backend.database.db_connection import get_db, row_to_dict
from backend.auth_service.passwords import hash_password, verify_password
from backend.auth_service.utils import issue_token, token_required
from backend.auth_service.permissions import json_object_body

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log every incoming request to the authentication service.
    Headers are left out since they carry bearer tokens.
    """
    logger.info("[Auth] Incoming %s %s", request.method, request.path)


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.
    """
    logger.info("[Auth] Response %s", response.status)
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user.

    Expects a JSON body with:
    - name (str)
    - email (str): Unique email address.
    - password (str)

    Returns:
        201: Confirmation message.
        400: Missing fields (with a `missing` map) or email already exists.
        500: Server-side error (hashing or database).
    """
    data: Dict[str, Any] = json_object_body()
    name = data.get("name")
    email = data.get("email")
    password = data.get("password")

    missing = {
        "name": not isinstance(name, str) or not name,
        "email": not isinstance(email, str) or not email,
        "password": not isinstance(password, str) or not password,
    }
    if any(missing.values()):
        return jsonify({"error": "All fields are required", "missing": missing}), 400

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT user_id FROM users WHERE email = %s;", (email,))
                if cur.fetchone():
                    return jsonify({"error": "Email already exists"}), 400

                cur.execute(
                    """
                    INSERT INTO users (name, email, password_hash)
                    VALUES (%s, %s, %s)
                    RETURNING user_id;
                    """,
                    (name, email, hash_password(password)),
                )
                user = cur.fetchone()
                conn.commit()
    except psycopg2.errors.UniqueViolation:
        # Lost a race with a concurrent registration for the same email.
        return jsonify({"error": "Email already exists"}), 400
    except Exception:
        logger.exception("Error registering user")
        return jsonify({"error": "Error registering user"}), 500

    logger.info("Registered user %s", user["user_id"])
    return jsonify({"message": "User registered"}), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: {"token": str, "user": {"id": int, "name": str}}
        400: Missing credentials.
        401: Invalid credentials (unknown email or wrong password).
        500: Database error.
    """
    data: Dict[str, Any] = json_object_body()
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "Email and password required"}), 400

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT user_id, name, password_hash FROM users WHERE email = %s;",
                    (email,),
                )
                user = cur.fetchone()
    except Exception:
        logger.exception("Error logging in")
        return jsonify({"error": "Error logging in"}), 500

    if not user or not verify_password(password, user["password_hash"]):
        return jsonify({"error": "Invalid credentials"}), 401

    token = issue_token(user["user_id"])

    return jsonify({
        "token": token,
        "user": {"id": user["user_id"], "name": user["name"]},
    }), 200


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
@token_required
def get_current_user() -> Tuple[Response, int]:
    """
    Retrieve the authenticated user's profile.

    Returns:
        200: {"id", "name", "email", "created_at"}
        401/403: Authentication failure.
        404: The token's user no longer exists (tokens are not revoked).
        500: Database error.
    """
    sql = """
        SELECT user_id AS id, name, email, created_at
        FROM users
        WHERE user_id = %s;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (g.user_id,))
                user = cur.fetchone()
    except Exception:
        logger.exception("Could not retrieve user")
        return jsonify({"error": "Could not retrieve user"}), 500

    if not user:
        return jsonify({"error": "User not found"}), 404

    return jsonify(row_to_dict(user)), 200
