from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.application.use_cases.notifications import build_notification_services
from app.config import Settings, get_settings
from app.infrastructure.database import (
    create_db_engine,
    create_session_factory,
    initialize_database,
)
from app.interfaces.api.routes import register_routes


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    engine = create_db_engine(settings.database_url)
    session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create missing tables on startup and release connections on shutdown."""

        initialize_database(engine)
        yield
        engine.dispose()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.notifications = build_notification_services(settings, session_factory)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


if __name__ == "__main__":  # pragma: no cover - manual entry point
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
