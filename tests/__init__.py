"""
PrivAccess Test Suite
=====================

Test organization:
- tests/unit/          - Unit tests (no external dependencies; snarkjs is faked or patched)

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
"""
