"""Error handling utilities for edge services."""

from .fastapi import build_error_body, register_error_handlers

__all__ = ["build_error_body", "register_error_handlers"]
