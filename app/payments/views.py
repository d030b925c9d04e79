"""
DRF views for the payments app.

Endpoints:
    GET  /api/v1/payments/?tenant_id=           - List payments
    POST /api/v1/payments/intent/               - Start a checkout
    POST /api/v1/payments/manual/               - Record a payment collected by staff
    GET  /api/v1/payments/delinquents/?tenant_id= - List delinquent members
    GET  /api/v1/payments/provider/connect/?tenant_id= - Mercado Pago consent URL
    GET  /api/v1/payments/provider/callback/    - OAuth callback (browser redirect)
    GET  /api/v1/payments/provider/status/?tenant_id= - Connection status

Security:
    - All endpoints except the OAuth callback and the webhook require a
      JWT for a user who is staff of the tenant
    - The callback is authenticated by its signed state parameter
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.http import HttpResponseRedirect
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.clock import SystemClock
from core.exceptions import BaseApplicationError
from core.responses import error_response, serializer_error_response
from payments.serializers import (
    CreateIntentSerializer,
    DelinquentSerializer,
    ManualPaymentSerializer,
    PaymentIntentSerializer,
    PaymentListQuerySerializer,
    PaymentSerializer,
    TenantQuerySerializer,
)
from payments.services import (
    ConnectionService,
    DelinquencyEngine,
    IntentService,
    PaymentFilters,
    PaymentLedger,
)
from tenants.permissions import IsTenantStaff, require_tenant_staff, tenant_id_from_request

logger = logging.getLogger(__name__)

TENANT_ID_PARAMETER = OpenApiParameter(
    name="tenant_id",
    type=str,
    location=OpenApiParameter.QUERY,
    required=True,
    description="Tenant UUID",
)


class PaymentListView(APIView):
    """
    List a tenant's payments, newest first.

    GET /api/v1/payments/?tenant_id=...&status=approved&limit=20

    Returns:
        {"payments": [...], "total": 42, "limit": 20, "offset": 0}
    """

    permission_classes = [IsAuthenticated, IsTenantStaff]

    @extend_schema(
        operation_id="list_payments",
        summary="List payments",
        parameters=[TENANT_ID_PARAMETER],
        responses={200: PaymentSerializer(many=True)},
        tags=["Payments"],
    )
    def get(self, request):
        query = PaymentListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return serializer_error_response(query.errors)
        params = query.validated_data

        try:
            page = PaymentLedger.find_many(
                params["tenant_id"],
                PaymentFilters(
                    member_id=params.get("member_id"),
                    status=params.get("status"),
                    period=params.get("period"),
                    provider=params.get("provider"),
                    date_from=params.get("date_from"),
                    date_to=params.get("date_to"),
                ),
                limit=params["limit"],
                offset=params["offset"],
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(
            {
                "payments": PaymentSerializer(page.payments, many=True).data,
                "total": page.total,
                "limit": page.limit,
                "offset": page.offset,
            }
        )


class CreateIntentView(APIView):
    """
    Start a checkout for a member's period.

    POST /api/v1/payments/intent/

    Request body:
        {
            "provider": "mercadopago",
            "member_id": "...",
            "tenant_id": "...",
            "period": "2024-05",
            "currency": "ARS"
        }

    Returns:
        {"intent_id": "...", "checkout_url": "...",
         "provider_preference_id": "...", "status": "pending"}
    """

    permission_classes = [IsAuthenticated, IsTenantStaff]

    @extend_schema(
        operation_id="create_payment_intent",
        summary="Create payment intent",
        request=CreateIntentSerializer,
        responses={
            200: PaymentIntentSerializer,
            400: OpenApiResponse(description="Invalid input or not configured"),
            403: OpenApiResponse(description="Not staff of the tenant"),
            409: OpenApiResponse(description="Period already paid"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = CreateIntentSerializer(data=request.data)
        if not serializer.is_valid():
            return serializer_error_response(serializer.errors)
        data = serializer.validated_data

        try:
            tenant_id_from_request(request)
            require_tenant_staff(request.user, data["tenant_id"])
            intent = IntentService.create_intent(
                provider=data["provider"],
                tenant_id=data["tenant_id"],
                member_id=data["member_id"],
                period=data["period"],
                currency=data.get("currency"),
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(PaymentIntentSerializer(intent).data, status=status.HTTP_200_OK)


class ManualPaymentView(APIView):
    """
    Record a payment collected in person.

    POST /api/v1/payments/manual/

    Returns:
        201 {"payment_id": "...", "status": "approved", "paid_at": "..."}
    """

    permission_classes = [IsAuthenticated, IsTenantStaff]

    @extend_schema(
        operation_id="create_manual_payment",
        summary="Record manual payment",
        request=ManualPaymentSerializer,
        responses={
            201: OpenApiResponse(description="Payment recorded"),
            403: OpenApiResponse(description="Not staff of the tenant"),
            409: OpenApiResponse(description="Period already paid"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = ManualPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return serializer_error_response(serializer.errors)
        data = serializer.validated_data

        try:
            tenant_id_from_request(request)
            require_tenant_staff(request.user, data["tenant_id"])
            payment = PaymentLedger.record_manual_payment(
                user=request.user,
                tenant_id=data["tenant_id"],
                member_id=data["member_id"],
                period=data["period"],
                amount=data["amount"],
                currency=data["currency"],
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response(
            {
                "payment_id": str(payment.id),
                "status": payment.status,
                "paid_at": payment.paid_at.isoformat() if payment.paid_at else None,
            },
            status=status.HTTP_201_CREATED,
        )


class DelinquentListView(APIView):
    """
    List members with an overdue obligation.

    GET /api/v1/payments/delinquents/?tenant_id=...

    Returns:
        {"delinquents": [{"member_id": "...", "period": "2024-05",
                          "due_date": "2024-05-10", "days_overdue": 36, ...}]}
    """

    permission_classes = [IsAuthenticated, IsTenantStaff]

    @extend_schema(
        operation_id="list_delinquents",
        summary="List delinquent members",
        parameters=[TENANT_ID_PARAMETER],
        responses={
            200: DelinquentSerializer(many=True),
            503: OpenApiResponse(description="Data temporarily unavailable"),
        },
        tags=["Payments"],
    )
    def get(self, request):
        query = TenantQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return serializer_error_response(query.errors, message="tenant_id is required")

        try:
            delinquents = DelinquencyEngine(clock=SystemClock()).compute_delinquents(
                query.validated_data["tenant_id"]
            )
        except BaseApplicationError as e:
            return error_response(e)

        return Response({"delinquents": DelinquentSerializer(delinquents, many=True).data})


# =============================================================================
# Provider connection
# =============================================================================


class ProviderConnectView(APIView):
    """
    Return the Mercado Pago consent URL for a tenant.

    GET /api/v1/payments/provider/connect/?tenant_id=...

    Returns:
        {"redirect_url": "https://auth.mercadopago.com/authorization?..."}
    """

    permission_classes = [IsAuthenticated, IsTenantStaff]

    @extend_schema(
        operation_id="provider_connect",
        summary="Start Mercado Pago connection",
        parameters=[TENANT_ID_PARAMETER],
        responses={
            200: OpenApiResponse(description="Consent URL"),
            503: OpenApiResponse(description="Integration disabled"),
        },
        tags=["Payments - Provider"],
    )
    def get(self, request):
        query = TenantQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return serializer_error_response(query.errors, message="tenant_id is required")

        try:
            url = ConnectionService.build_connect_url(query.validated_data["tenant_id"])
        except BaseApplicationError as e:
            return error_response(e)

        return Response({"redirect_url": url})


class ProviderCallbackView(APIView):
    """
    OAuth callback from Mercado Pago.

    GET /api/v1/payments/provider/callback/?code=...&state=...

    Always redirects to the payments settings page with
    mercadopago=connected or mercadopago=error&message=...
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    @staticmethod
    def _redirect(connected: bool, message: str | None = None) -> HttpResponseRedirect:
        params = {"tab": "config", "mercadopago": "connected" if connected else "error"}
        if message:
            params["message"] = message
        base_url = settings.APP_BASE_URL.rstrip("/")
        return HttpResponseRedirect(f"{base_url}/dashboard/payments?{urlencode(params)}")

    @extend_schema(
        operation_id="provider_callback",
        summary="Mercado Pago OAuth callback",
        responses={302: OpenApiResponse(description="Redirect to settings page")},
        tags=["Payments - Provider"],
    )
    def get(self, request):
        try:
            tenant_id = ConnectionService.complete_oauth(
                code=request.query_params.get("code", ""),
                state=request.query_params.get("state", ""),
            )
        except BaseApplicationError as e:
            logger.warning(
                "Mercado Pago connection failed",
                extra={"error_code": e.error_code},
            )
            return self._redirect(False, e.message)
        except Exception:
            logger.error("Unexpected error in Mercado Pago callback", exc_info=True)
            return self._redirect(False, "Could not connect to Mercado Pago")

        logger.info("Mercado Pago connected", extra={"tenant_id": tenant_id})
        return self._redirect(True)


class ProviderStatusView(APIView):
    """
    Whether the tenant has connected Mercado Pago.

    GET /api/v1/payments/provider/status/?tenant_id=...

    Returns:
        {"connected": true, "connected_at": "2024-05-01T12:00:00+00:00"}
    """

    permission_classes = [IsAuthenticated, IsTenantStaff]

    @extend_schema(
        operation_id="provider_status",
        summary="Mercado Pago connection status",
        parameters=[TENANT_ID_PARAMETER],
        tags=["Payments - Provider"],
    )
    def get(self, request):
        query = TenantQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return serializer_error_response(query.errors, message="tenant_id is required")

        return Response(ConnectionService.connection_status(query.validated_data["tenant_id"]))
