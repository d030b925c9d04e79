"""
Payments app for member dues.

This app handles:
- Checkout intents with Mercado Pago and dLocal Go
- Idempotent recording of approved payments from provider webhooks
- Manual payments collected by staff
- Delinquency computation and the daily reminder/suspension sweep
- Mercado Pago OAuth connections per tenant

Related apps:
    - tenants: Members, staff access and tenant scoping
    - notifications: Receipts, reminders and suspension notices

Usage:
    from payments.services import DelinquencyEngine, IntentService

    intent = IntentService.create_intent("mercadopago", tenant_id, member_id, "2024-05")
    delinquents = DelinquencyEngine(clock=SystemClock()).compute_delinquents(tenant_id)
"""
