"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .routes import control, messaging, observability


# Global application instance
_app: Application | None = None


def get_app() -> Application:
    """Get the global application instance."""
    global _app
    if not _app:
        _app = Application()
    return _app


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    application = application or get_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await application.start()
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="Chat Agent API",
        description="Conversational agent runtime with follow-up actions",
        version="0.1.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:5174"],  # Vite default
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(messaging.create_messaging_router(application))
    fastapi_app.include_router(observability.create_observability_router(application))
    fastapi_app.include_router(control.create_control_router(application))

    return fastapi_app
