"""
Comments service routes: rated comments on events.
Mounted under /api/events/<event_id>/comments.

One comment per user per event; only the author can edit or delete it.
"""

import logging
from typing import Tuple, Dict, Any

import psycopg2.errors
from flask import Blueprint, jsonify, g, Response

from backend.database.db_connection import get_db, row_to_dict
from backend.auth_service.utils import token_required
from backend.auth_service.permissions import (
    DUPLICATE_COMMENT_ERROR,
    ensure_no_existing_comment,
    json_object_body,
    require_own_comment,
    validate_rating,
)
from backend.errors import ApiError, ConflictError

logger = logging.getLogger(__name__)

comments_bp = Blueprint("comments", __name__)


@comments_bp.route("/", methods=["GET"])
def list_comments(event_id: int) -> Tuple[Response, int]:
    """
    Get all comments on an event with their authors, newest first.
    """
    sql = """
        SELECT ec.*, u.name, u.email
        FROM event_comments ec
        JOIN users u ON ec.user_id = u.user_id
        WHERE ec.event_id = %s
        ORDER BY ec.created_at DESC;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                comments = [row_to_dict(r) for r in cur.fetchall()]
    except Exception:
        logger.exception("Error fetching comments for event %s", event_id)
        return jsonify({"error": "Error fetching comments"}), 500

    return jsonify(comments), 200


@comments_bp.route("/", methods=["POST"])
@token_required
def add_comment(event_id: int) -> Tuple[Response, int]:
    """
    Add the caller's comment to an event.

    Expects JSON: {"rating": int 1-5, "comment": str}

    Returns:
        201: {"message": str, "commentId": int}
        400: Rating out of range, or the caller already commented.
        500: Database error.
    """
    data: Dict[str, Any] = json_object_body()
    rating = validate_rating(data.get("rating"))
    comment = data.get("comment")

    sql = """
        INSERT INTO event_comments (user_id, event_id, rating, comment)
        VALUES (%s, %s, %s, %s)
        RETURNING comment_id;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                ensure_no_existing_comment(cur, event_id, g.user_id)
                cur.execute(sql, (g.user_id, event_id, rating, comment))
                new_comment = cur.fetchone()
                conn.commit()
    except ApiError:
        raise
    except psycopg2.errors.UniqueViolation:
        # A concurrent request inserted first; the constraint caught it.
        raise ConflictError(DUPLICATE_COMMENT_ERROR)
    except Exception:
        logger.exception("Error adding comment to event %s", event_id)
        return jsonify({"error": "Error adding comment"}), 500

    return jsonify({
        "message": "Comment added successfully",
        "commentId": new_comment["comment_id"],
    }), 201


@comments_bp.route("/<int:comment_id>", methods=["PUT"])
@token_required
def update_comment(event_id: int, comment_id: int) -> Tuple[Response, int]:
    """
    Edit the caller's own comment.

    Returns:
        200: Comment updated.
        400: Rating out of range.
        404: Comment missing, on another event, or not the caller's.
    """
    data: Dict[str, Any] = json_object_body()
    rating = validate_rating(data.get("rating"))
    comment = data.get("comment")

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                require_own_comment(cur, comment_id, event_id, g.user_id)
                cur.execute(
                    "UPDATE event_comments SET rating = %s, comment = %s WHERE comment_id = %s;",
                    (rating, comment, comment_id),
                )
                conn.commit()
    except ApiError:
        raise
    except Exception:
        logger.exception("Error updating comment %s", comment_id)
        return jsonify({"error": "Error updating comment"}), 500

    return jsonify({"message": "Comment updated successfully"}), 200


@comments_bp.route("/<int:comment_id>", methods=["DELETE"])
@token_required
def delete_comment(event_id: int, comment_id: int) -> Tuple[Response, int]:
    """
    Delete the caller's own comment.
    """
    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                require_own_comment(cur, comment_id, event_id, g.user_id)
                cur.execute("DELETE FROM event_comments WHERE comment_id = %s;", (comment_id,))
                conn.commit()
    except ApiError:
        raise
    except Exception:
        logger.exception("Error deleting comment %s", comment_id)
        return jsonify({"error": "Error deleting comment"}), 500

    return jsonify({"message": "Comment deleted successfully"}), 200


@comments_bp.route("/my-comment", methods=["GET"])
@token_required
def my_comment(event_id: int) -> Tuple[Response, int]:
    """
    Get the caller's comment on this event, or null.
    """
    sql = """
        SELECT ec.*, e.title AS event_title
        FROM event_comments ec
        JOIN events e ON ec.event_id = e.event_id
        WHERE ec.user_id = %s AND ec.event_id = %s;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (g.user_id, event_id))
                comment = cur.fetchone()
    except Exception:
        logger.exception("Error fetching comment for event %s", event_id)
        return jsonify({"error": "Error fetching comment"}), 500

    return jsonify(row_to_dict(comment)), 200
