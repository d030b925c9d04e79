"""
State machine enums and helpers for payment models.

This module defines the state enums used by payment models with django-fsm.
"""

from payments.state_machines.states import (
    IntentStatus,
    PaymentProvider,
    PaymentStatus,
)

__all__ = [
    "IntentStatus",
    "PaymentProvider",
    "PaymentStatus",
]
