"""Middleware and request dependencies for the car rental API."""

from .auth import admin_required, get_current_identity, get_service_factory
from .logging import RequestResponseLoggingMiddleware

__all__ = [
    "admin_required",
    "get_current_identity",
    "get_service_factory",
    "RequestResponseLoggingMiddleware"
]
