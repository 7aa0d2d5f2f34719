"""Middleware modules"""

from portal.middleware.logging import StructuredLoggingMiddleware

__all__ = ["StructuredLoggingMiddleware"]
