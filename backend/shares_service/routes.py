"""
Shares service routes: record and summarize shares of an event.
Mounted under /api/events/<event_id>/shares.
"""

import logging
from typing import Tuple, Dict, Any

from flask import Blueprint, jsonify, g, Response

from backend.database.db_connection import get_db, row_to_dict
from backend.auth_service.utils import token_required
from backend.auth_service.permissions import json_object_body, validate_platform

logger = logging.getLogger(__name__)

shares_bp = Blueprint("shares", __name__)


@shares_bp.route("/", methods=["GET"])
def list_shares(event_id: int) -> Tuple[Response, int]:
    """
    Get all shares of an event with the sharing user, newest first.
    """
    sql = """
        SELECT es.*, u.name, u.email
        FROM event_shares es
        JOIN users u ON es.user_id = u.user_id
        WHERE es.event_id = %s
        ORDER BY es.created_at DESC;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                shares = [row_to_dict(r) for r in cur.fetchall()]
    except Exception:
        logger.exception("Error fetching shares for event %s", event_id)
        return jsonify({"error": "Error fetching shares"}), 500

    return jsonify(shares), 200


@shares_bp.route("/", methods=["POST"])
@token_required
def record_share(event_id: int) -> Tuple[Response, int]:
    """
    Record that the caller shared this event.

    Expects JSON: {"shared_via": "facebook" | "twitter" | "email" | "whatsapp" | "other"}

    Returns:
        201: {"message": str, "shareId": int}
        400: Unknown platform (response lists `validPlatforms`).
        500: Database error.
    """
    data: Dict[str, Any] = json_object_body()
    shared_via = validate_platform(data.get("shared_via"))

    sql = """
        INSERT INTO event_shares (user_id, event_id, shared_via)
        VALUES (%s, %s, %s)
        RETURNING share_id;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (g.user_id, event_id, shared_via))
                share = cur.fetchone()
                conn.commit()
    except Exception:
        logger.exception("Error recording share for event %s", event_id)
        return jsonify({"error": "Error recording share"}), 500

    return jsonify({"message": "Share recorded successfully", "shareId": share["share_id"]}), 201


@shares_bp.route("/my-shares", methods=["GET"])
@token_required
def my_shares(event_id: int) -> Tuple[Response, int]:
    """
    Get the caller's shares of this event.
    """
    sql = """
        SELECT es.*, e.title AS event_title
        FROM event_shares es
        JOIN events e ON es.event_id = e.event_id
        WHERE es.user_id = %s AND es.event_id = %s
        ORDER BY es.created_at DESC;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (g.user_id, event_id))
                shares = [row_to_dict(r) for r in cur.fetchall()]
    except Exception:
        logger.exception("Error fetching shares for event %s", event_id)
        return jsonify({"error": "Error fetching shares"}), 500

    return jsonify(shares), 200


@shares_bp.route("/stats", methods=["GET"])
def share_stats(event_id: int) -> Tuple[Response, int]:
    """
    Count shares per platform, most shared first.
    """
    sql = """
        SELECT shared_via, COUNT(*) AS share_count
        FROM event_shares
        WHERE event_id = %s
        GROUP BY shared_via
        ORDER BY share_count DESC;
    """

    try:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (event_id,))
                stats = [dict(r) for r in cur.fetchall()]
    except Exception:
        logger.exception("Error fetching share statistics for event %s", event_id)
        return jsonify({"error": "Error fetching share statistics"}), 500

    return jsonify(stats), 200
