"""
REST API for the league site.
Thin wrappers around the read-model services and persistence.
"""
from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from league_site import __version__, config
from league_site.logging import get_logger, setup_logging
from league_site.persistence import RecordSourceError, get_connection, get_db_path, init_db
from league_site.services import (
    CompetitionNotFoundError,
    EloService,
    SeasonNotFoundError,
    SeasonService,
)

log = get_logger("api")


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging(config.LOG_LEVEL, json_format=config.LOG_FORMAT == "json", service_name=config.SERVICE_NAME)
    init_db(db_path=get_db_path(), seed_path=config.SEED_PATH)
    log.info("startup", db_path=str(get_db_path()))
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="League Site API",
    description="Season cards, competition pages and leaderboards",
    version=__version__,
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

season_service = SeasonService()
elo_service = EloService()


@app.exception_handler(RecordSourceError)
async def record_source_error_handler(request: Request, exc: RecordSourceError) -> JSONResponse:
    log.error("record_source_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": "Record source unavailable"})


# ---------- Response models ----------


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Always 'ok' while the process serves requests")
    version: str


# ---------- Routes ----------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(version=__version__)


@app.get("/seasons")
def list_seasons() -> dict[str, Any]:
    """Season cards, newest first, with team/match counts, status and champions."""
    with db_conn() as conn:
        summaries = season_service.list_seasons(conn)
        return {"seasons": [s.to_dict() for s in summaries]}


@app.get("/seasons/{key}")
def get_season(key: str) -> dict[str, Any]:
    """One season card with the standings of each member competition."""
    with db_conn() as conn:
        try:
            return season_service.get_season(conn, key)
        except SeasonNotFoundError:
            raise HTTPException(status_code=404, detail="Season not found")


@app.get("/competitions/{competition_id}")
def get_competition(competition_id: str) -> dict[str, Any]:
    """Competition with standings, fixtures and top scorers/assists/clean sheets."""
    with db_conn() as conn:
        try:
            return season_service.get_competition(conn, competition_id)
        except CompetitionNotFoundError:
            raise HTTPException(status_code=404, detail="Competition not found")


@app.get("/elo")
def get_elo(
    limit: int | None = Query(None, ge=1, le=500, description="Rows per leaderboard; default 50"),
) -> dict[str, Any]:
    """Elo, matches played and win-rate leaderboards (active Elo season, else overall)."""
    with db_conn() as conn:
        return elo_service.leaderboards(conn, limit).to_dict()


# ---------- Run with: uvicorn league_site.api:app --reload ----------
