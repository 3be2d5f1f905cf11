"""
==============================================================================
Utilities Package
==============================================================================

Utility classes and functions for the application.

Modules:
--------
- validators: Endpoint URL and scan code validation

==============================================================================
"""

from .validators import EndpointURLValidator, ScanCodeValidator

__all__ = [
    "EndpointURLValidator",
    "ScanCodeValidator",
]
