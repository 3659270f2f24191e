"""
logarchive test suite.

Tests are organized by layer:
    tests/unit/         Unit tests (temporary directories only)
    tests/integration/  CLI tests through click's CliRunner

Run all tests:
    pytest

Run unit tests only:
    pytest tests/unit/
"""
