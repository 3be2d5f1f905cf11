"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for barcode scanning.

Handlers:
---------
- scanner: Frame or code submission with per-decode scan/duplicate replies

==============================================================================
"""

from .scanner import router as scanner_router

__all__ = ["scanner_router"]
