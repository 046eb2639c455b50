"""Runtime settings read from the environment (and an optional .env file).

The database URL is resolved separately by ``data.db.get_database_url`` so
tests can swap it per run.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

# Session tokens
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"
SESSION_MAX_AGE_DAYS = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))

# Comma-separated list, "*" allows every origin
CORS_ORIGINS = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]
