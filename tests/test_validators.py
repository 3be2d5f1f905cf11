"""
==============================================================================
Validator Tests
==============================================================================

Tests for endpoint URL and scan code validation.

==============================================================================
"""

import pytest

from scanrelay.utils import EndpointURLValidator, ScanCodeValidator


class TestEndpointURLValidator:
    """Tests for EndpointURLValidator."""

    @pytest.mark.parametrize("url", [
        "http://192.168.50.128:5000",
        "https://scans.example.com/api/scan",
        "http://localhost:8080/in?device=3",
        "  http://10.0.0.5:5000  ",
    ])
    def test_valid_urls(self, url: str):
        assert EndpointURLValidator().validate(url) == (True, None)

    @pytest.mark.parametrize("url,message", [
        ("", "required"),
        ("   ", "required"),
        ("ftp://10.0.0.5/scan", "http"),
        ("http://10.0.0.5/a b", "whitespace"),
        ("http://", "host"),
    ])
    def test_invalid_urls(self, url: str, message: str):
        is_valid, error = EndpointURLValidator().validate(url)
        assert is_valid is False
        assert message in error

    def test_too_long(self):
        url = "http://example.com/" + "a" * 2048
        assert EndpointURLValidator().is_valid(url) is False


class TestScanCodeValidator:
    """Tests for ScanCodeValidator."""

    @pytest.mark.parametrize("code", ["8801234567890", "A", " padded ", "https://example.com/qr"])
    def test_valid_codes(self, code: str):
        assert ScanCodeValidator().is_valid(code) is True

    @pytest.mark.parametrize("code", ["", "   ", "\t\n", None])
    def test_blank_codes(self, code):
        is_valid, error = ScanCodeValidator().validate(code)
        assert is_valid is False
        assert "empty" in error

    def test_too_long(self):
        assert ScanCodeValidator().is_valid("9" * 4097) is False
        assert ScanCodeValidator().is_valid("9" * 4096) is True
