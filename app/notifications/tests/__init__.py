"""
Tests for notifications app.

This package contains test modules for:
- test_models.py: EmailEvent dedup ledger
- test_services.py: EmailEventService dispatch and rendering
- test_tasks.py: Email delivery task and EmailService
"""
