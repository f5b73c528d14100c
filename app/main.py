"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_settings
from app.core.context import build_context
from app.core.logging import setup_logging
from app.api import health
from app.api.webhooks import calls


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    settings = get_settings()
    setup_logging(settings.log_level)
    app.state.context = build_context(settings)
    yield
    # Shutdown
    await app.state.context.aclose()


app = FastAPI(
    title="ACS Voice Agent",
    description="Voice call agent on Azure Communication Services Call Automation and OpenAI",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(calls.router, prefix="/api", tags=["webhooks"])


def run() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
