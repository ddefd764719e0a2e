"""Configuration utilities for edge services."""

from .service_settings import Environment, ServiceSettings

__all__ = ["Environment", "ServiceSettings"]
