"""
PostgreSQL connection helper.
Provides get_db() for use by services.
"""

import datetime
import logging
from typing import Optional

import psycopg2
from psycopg2.extras import DictCursor
from flask import current_app

logger = logging.getLogger(__name__)


def get_db(dsn: Optional[str] = None):
    """
    Returns a new psycopg2 connection with dictionary-based row access.

    The DSN defaults to DATABASE_URL from the running app's config.

    Usage:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(...)

    Returns:
        psycopg2.extensions.connection: A connection object with DictCursor factory.

    Raises:
        RuntimeError: If no DSN is configured.
        psycopg2.Error: If connection fails.
    """
    dsn = dsn or current_app.config.get("DATABASE_URL")
    if not dsn:
        raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")

    try:
        conn = psycopg2.connect(dsn)
        # Rows come back dict-like (e.g., {"user_id": 1, "email": "..."})
        conn.cursor_factory = DictCursor
        return conn
    except psycopg2.Error:
        logger.exception("Error connecting to database")
        raise


def row_to_dict(row) -> Optional[dict]:
    """
    Convert a DictCursor row into a JSON-ready dict.

    date, time and datetime values become ISO-8601 strings.
    """
    if row is None:
        return None
    result = dict(row)
    for key, value in result.items():
        if isinstance(value, (datetime.date, datetime.time)):
            result[key] = value.isoformat()
    return result
