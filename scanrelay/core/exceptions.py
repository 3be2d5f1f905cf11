"""
Application Exception Handling

AppException for API-facing errors with FastAPI integration, plus the
DeliveryError hierarchy used inside the delivery pipeline.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for API error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Scan not found", "SCAN_NOT_FOUND", 404)

    Error Codes:
        Scans:
            - SCAN_NOT_FOUND (404)
            - INVALID_SCAN_CODE (422)
            - INVALID_SCAN_TYPE (422)

        Settings:
            - INVALID_ENDPOINT_URL (422)

        General:
            - SERVICE_UNAVAILABLE (503)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "SCAN_NOT_FOUND")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException to a consistent JSON error response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def scan_not_found(scan_id: Optional[str] = None) -> AppException:
    """Create scan not found exception."""
    details = {"scan_id": scan_id} if scan_id else {}
    return AppException("Scan not found", "SCAN_NOT_FOUND", 404, details)


def invalid_scan_code(reason: str) -> AppException:
    """Create invalid scan code exception."""
    return AppException(
        f"Invalid scan code: {reason}",
        "INVALID_SCAN_CODE",
        422,
        {"reason": reason}
    )


def invalid_scan_type(scan_type: str, allowed: tuple) -> AppException:
    """Create unsupported scan type exception."""
    return AppException(
        f"Unsupported scan type '{scan_type}'",
        "INVALID_SCAN_TYPE",
        422,
        {"scan_type": scan_type, "allowed": list(allowed)}
    )


def invalid_endpoint_url(url: str, reason: str) -> AppException:
    """Create invalid endpoint URL exception."""
    return AppException(
        f"Invalid endpoint URL: {reason}",
        "INVALID_ENDPOINT_URL",
        422,
        {"endpoint_url": url, "reason": reason}
    )


def service_unavailable(component: str) -> AppException:
    """Create exception for a component that has not been started."""
    return AppException(
        f"{component} is not available",
        "SERVICE_UNAVAILABLE",
        503,
        {"component": component}
    )


# ============================================
# DELIVERY PIPELINE ERRORS
# ============================================

class DeliveryError(Exception):
    """
    Base class for a failed delivery attempt.

    Raised inside the dispatcher and converted to a Failed status at its
    boundary. Never propagates to the caller of dispatch().
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(DeliveryError):
    """No endpoint configured, or the configured endpoint is not a valid URL."""


class TransportError(DeliveryError):
    """Network failure: DNS, refused connection, timeout."""


class ProtocolError(DeliveryError):
    """Remote endpoint answered with anything but HTTP 200."""


class SerializationError(DeliveryError):
    """The delivery payload could not be encoded."""
