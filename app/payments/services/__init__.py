"""
Payment services.

This module provides:
- PaymentLedger: Payment persistence with database-enforced uniqueness
- DelinquencyEngine: Earliest overdue obligation per member
- IntentService: Checkout creation through provider adapters
- ConnectionService: Per-tenant provider credentials and OAuth flow

Usage:
    from payments.services import IntentService

    intent = IntentService.create_intent(
        provider="mercadopago",
        tenant_id=tenant.id,
        member_id=member.id,
        period="2024-05",
    )

    from payments.services import DelinquencyEngine

    delinquents = DelinquencyEngine().compute_delinquents(tenant.id)
"""

from payments.services.connection_service import ConnectionService
from payments.services.delinquency import DelinquencyEngine, DelinquentInfo
from payments.services.intent_service import IntentService
from payments.services.ledger import (
    PaymentFilters,
    PaymentLedger,
    PaymentPage,
    PaymentRecord,
)
from payments.services.pricing import ExpectedAmount, get_expected_amount_for_period

__all__ = [
    "ConnectionService",
    "DelinquencyEngine",
    "DelinquentInfo",
    "ExpectedAmount",
    "IntentService",
    "PaymentFilters",
    "PaymentLedger",
    "PaymentPage",
    "PaymentRecord",
    "get_expected_amount_for_period",
]
