"""
Application configuration.
Reads environment variables (and .env, if present) once at startup.
"""

import os
from typing import Dict, Any

from dotenv import load_dotenv

# Load .env only once here
load_dotenv()

DEFAULT_TOKEN_EXPIRATION_MINUTES = 1440  # 24 hours


class Config:
    """
    Process-wide settings. Values are read-only after the app is created.

    Attributes:
        DATABASE_URL (str): PostgreSQL DSN used by get_db().
        JWT_SECRET (str): Secret used to sign and verify session tokens.
        TOKEN_EXPIRATION_MINUTES (int): Session token lifetime.
        CORS_ORIGINS (list): Allowed origins for the browser frontend.
        LOG_LEVEL (str): Root logging level.
        GATEWAY_PORT (int): Port for the development server.
    """

    def __init__(self) -> None:
        self.DATABASE_URL = os.getenv("DATABASE_URL")
        self.JWT_SECRET = os.getenv("JWT_SECRET")
        self.TOKEN_EXPIRATION_MINUTES = int(
            os.getenv("TOKEN_EXPIRATION_MINUTES", DEFAULT_TOKEN_EXPIRATION_MINUTES)
        )
        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.GATEWAY_PORT = int(os.getenv("GATEWAY_PORT", 5050))

    def as_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in vars(self).items() if key.isupper()}


def load_config(overrides: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Build the settings mapping for a Flask app.

    Args:
        overrides (dict, optional): Values that take precedence over the
            environment (used by tests).

    Returns:
        dict: Settings ready for app.config.update().

    Raises:
        RuntimeError: If JWT_SECRET is not configured.
    """
    settings = Config().as_dict()
    if overrides:
        settings.update(overrides)

    if not settings.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET is missing. Set it in .env")

    return settings
