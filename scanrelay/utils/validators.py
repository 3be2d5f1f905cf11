"""
==============================================================================
Validation Utilities Module
==============================================================================

Validation classes for input data.

This module implements:
- EndpointURLValidator: Validates delivery endpoint URLs
- ScanCodeValidator: Validates decoded scan strings

Validation Rules for Endpoint URLs:
----------------------------------
- Scheme must be http or https
- Host must be present
- No embedded whitespace

The decoder does not report symbology, so scan codes are accepted as long
as they contain a non-whitespace character and fit the length limit.

==============================================================================
"""

from __future__ import annotations

from typing import Optional, Tuple

import httpx


class EndpointURLValidator:
    """
    Validator for delivery endpoint URLs.

    Example:
        >>> validator = EndpointURLValidator()
        >>> validator.validate("http://192.168.50.128:5000")
        (True, None)
    """

    ALLOWED_SCHEMES = ("http", "https")
    MAX_LENGTH = 2048

    def validate(self, url: str) -> Tuple[bool, Optional[str]]:
        """
        Validate an endpoint URL.

        Args:
            url: Raw URL input

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not url or not url.strip():
            return False, "URL is required"

        url = url.strip()

        if len(url) > self.MAX_LENGTH:
            return False, f"URL must be at most {self.MAX_LENGTH} characters"

        if any(ch.isspace() for ch in url):
            return False, "URL cannot contain whitespace"

        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as e:
            return False, f"URL could not be parsed: {e}"

        if parsed.scheme not in self.ALLOWED_SCHEMES:
            return False, "URL must start with http:// or https://"

        if not parsed.host:
            return False, "URL must include a host"

        return True, None

    def is_valid(self, url: str) -> bool:
        """Quick validation check."""
        is_valid, _ = self.validate(url)
        return is_valid


class ScanCodeValidator:
    """
    Validator for decoded scan strings.
    """

    MAX_LENGTH = 4096

    def validate(self, code: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a decoded string.

        Args:
            code: Decoded barcode or QR payload

        Returns:
            Tuple of (is_valid, error_message)
        """
        if code is None or not code.strip():
            return False, "Code cannot be empty"

        if len(code) > self.MAX_LENGTH:
            return False, f"Code must be at most {self.MAX_LENGTH} characters"

        return True, None

    def is_valid(self, code: str) -> bool:
        """Quick validation check."""
        is_valid, _ = self.validate(code)
        return is_valid
