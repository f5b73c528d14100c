"""Liveness endpoints."""
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.core.context import AppContext
from app.core.dependencies import get_context

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Hello ACS CallAutomation!"


@router.get("/health")
async def health_check(context: AppContext = Depends(get_context)):
    """Report liveness and the number of calls in progress."""
    return {"status": "healthy", "active_calls": len(context.sessions)}
