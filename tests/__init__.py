"""
Test suite for object-dispatch.

Test structure:
- unit/ - Unit tests (fast, isolated)
- integration/ - Runtime tests (class modules, tracing, TSV logs)
- fixtures/ - Shared class modules

Run tests:
    pytest                    # All tests
    pytest tests/unit         # Unit tests only
    pytest tests/integration  # Integration tests only
    pytest -k "dispatcher"    # Tests matching name
"""
