"""
Runtime configuration from environment variables.
"""
from __future__ import annotations

import os
from pathlib import Path


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


DB_PATH = Path(os.environ.get("LEAGUE_SITE_DB_PATH", str(_project_root() / "data" / "league.db")))
# JSON export (collection name -> documents) loaded into the store at startup when present
SEED_PATH = Path(os.environ.get("LEAGUE_SITE_SEED_PATH", str(_project_root() / "data" / "seed.json")))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("LOG_FORMAT", "console").lower()  # "console" | "json"
SERVICE_NAME = os.environ.get("SERVICE_NAME", "league-site")

CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]

# Leaderboard sizes; lists are cut to these after sorting
ELO_LEADERBOARD_SIZE = 50
STAT_LEADERBOARD_SIZE = 7
