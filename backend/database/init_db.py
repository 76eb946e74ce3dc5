"""
Database initializer.

Applies schema.sql to the database in DATABASE_URL and checks that every
table the services rely on exists afterwards.

Usage:
    python -m backend.database.init_db
"""

import logging
import os
import sys
from pathlib import Path

import psycopg2
from psycopg2.extras import DictCursor
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")
REQUIRED_TABLES = ["users", "events", "event_participants", "event_comments", "event_shares"]


def apply_schema(conn) -> None:
    """
    Execute schema.sql inside a single transaction.
    """
    sql = SCHEMA_PATH.read_text(encoding="utf-8")
    with conn.cursor() as cur:
        cur.execute(sql)
    conn.commit()


def missing_tables(conn) -> list:
    """
    Return the names of required tables that do not exist.
    """
    missing = []
    with conn.cursor() as cur:
        for table in REQUIRED_TABLES:
            cur.execute("SELECT to_regclass(%s);", (table,))
            if cur.fetchone()[0] is None:
                missing.append(table)
    return missing


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

    dsn = os.getenv("DATABASE_URL")
    if not dsn:
        logger.error("DATABASE_URL is not set. Please set the environment variable.")
        return 1

    conn = psycopg2.connect(dsn, cursor_factory=DictCursor)
    try:
        apply_schema(conn)
        missing = missing_tables(conn)
    except psycopg2.Error:
        conn.rollback()
        logger.exception("Schema initialization failed")
        return 1
    finally:
        conn.close()

    if missing:
        logger.error("Tables missing after init: %s", ", ".join(missing))
        return 1

    logger.info("Database initialized: %s", ", ".join(REQUIRED_TABLES))
    return 0


if __name__ == "__main__":
    sys.exit(main())
