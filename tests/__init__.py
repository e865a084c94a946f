"""
Sitedata test suite.

Tests are organized by layer:
    tests/unit/         Unit tests (temporary SQLite files, no network)

Run all tests:
    pytest

Run with coverage:
    pytest --cov=sitedata
"""
