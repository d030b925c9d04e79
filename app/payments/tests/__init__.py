"""
Tests for payments app.

This package contains test modules for:
- test_models.py: Payment, PaymentIntent and ProviderConnection models
- test_ledger.py / test_delinquency.py: Ledger and delinquency services
- test_intent_service.py / test_connection_service.py: Checkout and OAuth
- test_tasks.py: Daily delinquency sweep
- test_views.py: API endpoint tests

Usage:
    pytest payments/tests/
    pytest payments/tests/test_delinquency.py
"""
