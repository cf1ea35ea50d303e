from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    Does NOT auto-migrate; the operator runs `alembic upgrade head`.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        actual: set[str] = set(sa_inspect(get_engine()).get_table_names())
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = set(Base.metadata.tables.keys()) - actual
    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate the schema when using the database; drain background jobs on exit."""
    from app.config import get_race_results_settings
    from app.services.race_results_service import get_race_results_service

    settings = get_race_results_settings()
    if settings.storage_backend == "sqlalchemy":
        _check_schema()
        logging.getLogger(__name__).info("Database schema validated")

    try:
        yield
    finally:
        if get_race_results_service.cache_info().currsize:
            get_race_results_service().shutdown()
            logging.getLogger(__name__).info("Race results service shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="Race Results Extractor API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import race_results_router

    application.include_router(race_results_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
