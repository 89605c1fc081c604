"""
PillTracker Test Suite
======================

Test Structure:
- test_tools/: timing classifier, notification queue, identity and names
- test_actions/: reminder scheduling
- test_services/: medication, adherence and admin services
- test_api/: API endpoint tests for FastAPI routes
- conftest.py: Shared pytest fixtures

Running Tests:
    # Run all tests
    pytest

    # Run specific test module
    pytest tests/test_api/

    # Run only marked tests
    pytest -m "unit"
    pytest -m "api"
"""
