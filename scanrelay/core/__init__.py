"""
==============================================================================
Core Package
==============================================================================

Core infrastructure shared by the API and the delivery pipeline.

This package provides:
- AppException with consistent JSON error responses
- Exception factory functions for common error scenarios
- DeliveryError hierarchy for delivery attempt failures

Usage:
------
    from scanrelay.core import exceptions
    raise exceptions.scan_not_found(scan_id)

==============================================================================
"""

from .exceptions import (
    AppException,
    ConfigurationError,
    DeliveryError,
    ProtocolError,
    SerializationError,
    TransportError,
    register_exception_handlers,
)

__all__ = [
    # API errors
    "AppException",
    "register_exception_handlers",
    # Delivery errors
    "DeliveryError",
    "ConfigurationError",
    "TransportError",
    "ProtocolError",
    "SerializationError",
]
