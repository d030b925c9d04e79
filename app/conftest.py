"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import pytest


def pytest_configure():
    """Adjust settings for the test run."""
    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Test client speaks plain HTTP
    settings.SECURE_SSL_REDIRECT = False

    # Use fast password hasher for tests
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    settings.APP_BASE_URL = "https://dues.example.com"
    settings.MERCADOPAGO_CLIENT_ID = "test-client-id"
    settings.MERCADOPAGO_CLIENT_SECRET = "test-client-secret"
    settings.MERCADOPAGO_OAUTH_STATE_SECRET = "test-state-secret"
    settings.MERCADOPAGO_WEBHOOK_SECRET = ""
    settings.MERCADOPAGO_USE_TEST_TOKENS = False
    settings.DLOCAL_API_KEY = "test-dlocal-key"
    settings.DLOCAL_SECRET_KEY = "test-dlocal-secret"


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_views.py, test_services.py, test_tasks.py, etc. → integration
    - test_models.py, test_serializers.py, test_periods.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_periods.py",
        "test_oauth.py",
        "test_adapters.py",
        "test_state_transitions.py",
    ]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration"}:
            continue

        filename = str(item.fspath).split("/")[-1]
        if filename in unit_patterns:
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)
