"""
State enums for payment models.

PaymentStatus is driven by django-fsm transitions on Payment; the other
enums are plain choices.

Usage:
    from payments.state_machines import PaymentStatus, PaymentProvider

    Payment.objects.filter(status=PaymentStatus.APPROVED)
"""

from django.db import models


class PaymentStatus(models.TextChoices):
    """
    Lifecycle of a recorded payment.

    State Flow:
        PENDING -> APPROVED -> REFUNDED
        PENDING -> REJECTED

    APPROVED is terminal apart from the refund transition.
    """

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    REFUNDED = "refunded", "Refunded"


class PaymentProvider(models.TextChoices):
    """Where a payment was collected."""

    MERCADOPAGO = "mercadopago", "Mercado Pago"
    DLOCAL = "dlocal", "dLocal"
    MANUAL = "manual", "Manual"

    @classmethod
    def online(cls) -> list[str]:
        """Providers that start checkouts and deliver webhooks."""
        return [cls.MERCADOPAGO, cls.DLOCAL]


class IntentStatus(models.TextChoices):
    """Status of a started checkout."""

    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    EXPIRED = "expired", "Expired"
