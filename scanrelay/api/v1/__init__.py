"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- scans: Scan submission and history
- settings: Device configuration

==============================================================================
"""

from . import health, scans, settings

__all__ = ["health", "scans", "settings"]
