"""
Webhook endpoint for provider payment notifications.

The view:
1. Verifies the provider signature
2. Validates the payload
3. Records the payment idempotently
4. Returns 200 for new and replayed deliveries alike

A non-2xx response makes the provider retry, so receipt-email failures
never change the status code.

Usage:
    # In urls.py
    from payments.webhooks.views import payment_webhook

    urlpatterns = [
        path("webhook/", payment_webhook, name="webhook"),
    ]
"""

from __future__ import annotations

import json
import logging

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from core.exceptions import BaseApplicationError
from core.responses import error_payload
from payments.adapters import DLocalAdapter, MercadoPagoAdapter
from payments.serializers import WebhookPaymentSerializer
from payments.state_machines import PaymentProvider
from payments.webhooks.handlers import handle_payment_notification

logger = logging.getLogger(__name__)


def verify_signature(request: HttpRequest, payload: dict) -> None:
    """
    Check the provider signature of a delivery.

    dLocal deliveries are always verified against the platform keys.
    Mercado Pago deliveries are verified with MERCADOPAGO_WEBHOOK_SECRET,
    and skipped with a warning when it is empty (sandbox setups).

    Raises:
        WebhookSignatureError: Signature missing or wrong
    """
    provider = payload.get("provider")
    if provider == PaymentProvider.DLOCAL:
        DLocalAdapter().verify_webhook_signature(
            request.headers.get("authorization", ""), request.body
        )
        return
    if provider != PaymentProvider.MERCADOPAGO:
        return

    secret = settings.MERCADOPAGO_WEBHOOK_SECRET
    if not secret:
        logger.warning("Webhook signature verification skipped: no secret configured")
        return

    data_id = request.GET.get("data.id") or str(payload.get("provider_payment_id", ""))
    MercadoPagoAdapter.verify_webhook_signature(
        secret=secret,
        signature_header=request.headers.get("x-signature", ""),
        request_id=request.headers.get("x-request-id", ""),
        data_id=data_id,
    )


@csrf_exempt
@require_POST
def payment_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive an approved-payment notification.

    Returns:
        JsonResponse with status:
        - 200: {"ok": true} for new payments and replays
        - 400: Invalid payload, non-approved status, member not in tenant
        - 401: Invalid signature
        - 500: Unexpected failure
    """
    try:
        payload = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        logger.warning("Webhook body is not valid JSON")
        return JsonResponse(
            {"error": "Invalid JSON", "error_code": "VALIDATION_ERROR"}, status=400
        )
    if not isinstance(payload, dict):
        return JsonResponse(
            {"error": "Invalid payload", "error_code": "VALIDATION_ERROR"}, status=400
        )

    try:
        verify_signature(request, payload)

        serializer = WebhookPaymentSerializer(data=payload)
        if not serializer.is_valid():
            logger.info(
                "Webhook payload rejected",
                extra={"errors": serializer.errors, "provider": payload.get("provider")},
            )
            return JsonResponse(
                {
                    "error": "Invalid payload",
                    "error_code": "VALIDATION_ERROR",
                    "details": serializer.errors,
                },
                status=400,
            )

        result = handle_payment_notification(serializer.validated_data)
    except BaseApplicationError as e:
        if e.http_status >= 500:
            logger.error("Webhook processing failed", extra={"error_code": e.error_code})
        else:
            logger.info("Webhook rejected", extra={"error_code": e.error_code})
        return JsonResponse(error_payload(e), status=e.http_status)
    except Exception:
        logger.error("Unexpected error processing webhook", exc_info=True)
        return JsonResponse(
            {"error": "Internal server error", "error_code": "INTERNAL_ERROR"},
            status=500,
        )

    outcome = result.data
    body = {"ok": True}
    if not outcome.created:
        body["message"] = outcome.message
    else:
        body["payment_id"] = str(outcome.payment.id)
    return JsonResponse(body, status=200)
