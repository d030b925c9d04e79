"""
Payment adapters for external providers.

All provider API calls go through these adapters so error handling,
timeouts and logging stay consistent.

Usage:
    from payments.adapters import CreateCheckoutParams, get_adapter

    adapter = get_adapter("mercadopago")
    if adapter.requires_connection:
        connection = ConnectionService.require_connection(tenant_id, adapter.provider)
"""

from payments.adapters.base import (
    CheckoutResult,
    CreateCheckoutParams,
    PaymentProviderAdapter,
    TokenExchangeResult,
)
from payments.adapters.dlocal_adapter import DLocalAdapter
from payments.adapters.mercadopago_adapter import MercadoPagoAdapter
from payments.state_machines import PaymentProvider

_ADAPTERS = {
    PaymentProvider.MERCADOPAGO: MercadoPagoAdapter,
    PaymentProvider.DLOCAL: DLocalAdapter,
}


def get_adapter(provider: str) -> PaymentProviderAdapter:
    """Return an adapter for an online provider. Raises ValueError otherwise."""
    try:
        adapter_class = _ADAPTERS[PaymentProvider(provider)]
    except (KeyError, ValueError):
        raise ValueError(f"No adapter for provider {provider!r}")
    return adapter_class()


__all__ = [
    "CheckoutResult",
    "CreateCheckoutParams",
    "DLocalAdapter",
    "MercadoPagoAdapter",
    "PaymentProviderAdapter",
    "TokenExchangeResult",
    "get_adapter",
]
