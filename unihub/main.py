from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unihub.config import get_settings
from unihub.infrastructure.database import engine, initialize_database
from unihub.infrastructure.email import get_mail_transport
from unihub.infrastructure.notifications import drain_background_tasks
from unihub.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database on startup and release resources on shutdown."""

    initialize_database()
    get_mail_transport()
    yield
    await drain_background_tasks()
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    app = FastAPI(title="UniHub notifications", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
