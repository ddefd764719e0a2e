"""
Edge Service Libraries Package.

Shared infrastructure for edge services: structured logging, settings base
classes, FastAPI error handlers and the Result container.
"""

from .result import Result

__all__ = ["Result"]

# Framework-specific helpers should be imported directly from:
# - edge_service_libs.error_handling.fastapi
# - edge_service_libs.logging_utils
