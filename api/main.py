from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from benefits import router as benefits_router
from core import responses, settings
from core.db import Database, get_database
from search import router as search_router


def create_app(database: Database | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await app.state.database.close()

    app = FastAPI(lifespan=lifespan)
    # One pool owner per process; the pool itself opens on first use.
    app.state.database = database if database is not None else Database()

    # Answers browser preflight requests; regular responses set their own CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins(),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    responses.install_exception_handlers(app)

    app.include_router(benefits_router.router, tags=["benefits"])
    app.include_router(search_router.router, tags=["search"])

    @app.get("/health")
    async def health(database: Database = Depends(get_database)) -> dict:
        return {"status": "ok", "database": await database.check_connection()}

    @app.get("/")
    def root() -> dict:
        return {"message": "benefits catalog api"}

    return app


app = create_app()
