"""FastAPI dependencies."""
from fastapi import Depends, Request

from app.core.context import AppContext
from app.services.call_session.controller import CallSessionController


def get_context(request: Request) -> AppContext:
    """Get the application context built at startup."""
    return request.app.state.context


def get_controller(context: AppContext = Depends(get_context)) -> CallSessionController:
    """Get the call session controller."""
    return context.controller
