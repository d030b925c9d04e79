"""
Tests for the payments API views.

Tests cover:
- Authentication and tenant staff authorization
- Intent creation and its error statuses
- Manual payments
- Payment list and delinquents
- Provider connect, callback and status
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

import pytest
from django.db import OperationalError
from django.utils import timezone
from freezegun import freeze_time

from payments.adapters import CheckoutResult, TokenExchangeResult
from payments.models import Payment, PaymentIntent, ProviderConnection
from payments.oauth import OAuthStateSigner
from payments.state_machines import PaymentProvider
from payments.tests.factories import PaymentFactory
from tenants.tests.factories import MemberFactory, UserFactory

INTENT_URL = "/api/v1/payments/intent/"
MANUAL_URL = "/api/v1/payments/manual/"
LIST_URL = "/api/v1/payments/"
DELINQUENTS_URL = "/api/v1/payments/delinquents/"
CONNECT_URL = "/api/v1/payments/provider/connect/"
CALLBACK_URL = "/api/v1/payments/provider/callback/"
STATUS_URL = "/api/v1/payments/provider/status/"


@pytest.fixture
def mock_mp_checkout():
    with patch(
        "payments.adapters.mercadopago_adapter.MercadoPagoAdapter.create_checkout",
        return_value=CheckoutResult(
            checkout_url="https://www.mercadopago.com.ar/checkout/v1/redirect?pref_id=pref-1",
            provider_preference_id="pref-1",
            raw_response={},
        ),
    ) as mock:
        yield mock


def intent_body(member, **overrides):
    body = {
        "provider": "mercadopago",
        "member_id": str(member.id),
        "tenant_id": str(member.tenant_id),
        "period": "2024-05",
    }
    body.update(overrides)
    return body


# =============================================================================
# Authorization
# =============================================================================


@pytest.mark.django_db
class TestAuthorization:
    def test_unauthenticated_rejected(self, api_client, member):
        response = api_client.post(INTENT_URL, intent_body(member), format="json")
        assert response.status_code == 401

    def test_staff_of_other_tenant_forbidden(self, authenticated_client_factory, member):
        """A user without a staff membership in the tenant gets 403."""
        client = authenticated_client_factory(UserFactory())

        response = client.post(INTENT_URL, intent_body(member), format="json")

        assert response.status_code == 403

    def test_list_requires_staff(self, authenticated_client_factory, tenant):
        client = authenticated_client_factory(UserFactory())

        response = client.get(LIST_URL, {"tenant_id": str(tenant.id)})

        assert response.status_code == 403

    def test_manual_payment_for_other_tenant_forbidden(
        self, staff_client, other_tenant, mock_email_delay
    ):
        outsider = MemberFactory(tenant=other_tenant)

        response = staff_client.post(
            MANUAL_URL,
            {
                "member_id": str(outsider.id),
                "tenant_id": str(other_tenant.id),
                "period": "2024-05",
                "amount": "5000.00",
            },
            format="json",
        )

        assert response.status_code == 403
        assert Payment.objects.filter(tenant=other_tenant).count() == 0

    def test_query_tenant_cannot_authorize_body_tenant(
        self, staff_client, tenant, other_tenant, mock_email_delay
    ):
        """Staff of one tenant cannot act on another by naming their own in the query."""
        outsider = MemberFactory(tenant=other_tenant)

        response = staff_client.post(
            f"{MANUAL_URL}?tenant_id={tenant.id}",
            {
                "member_id": str(outsider.id),
                "tenant_id": str(other_tenant.id),
                "period": "2024-05",
                "amount": "5000.00",
            },
            format="json",
        )

        assert response.status_code in (400, 403)
        assert Payment.objects.filter(tenant=other_tenant).count() == 0

    def test_query_body_tenant_mismatch_returns_400(
        self, staff_client, tenant, other_tenant, mock_mp_checkout
    ):
        outsider = MemberFactory(tenant=other_tenant)

        response = staff_client.post(
            f"{INTENT_URL}?tenant_id={tenant.id}",
            intent_body(outsider),
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "TENANT_MISMATCH"
        mock_mp_checkout.assert_not_called()
        assert PaymentIntent.objects.count() == 0


# =============================================================================
# Intent
# =============================================================================


@pytest.mark.django_db
class TestCreateIntentView:
    def test_returns_checkout(self, staff_client, member, payment_config, connection, mock_mp_checkout):
        response = staff_client.post(INTENT_URL, intent_body(member), format="json")

        assert response.status_code == 200
        data = response.json()
        assert data["checkout_url"].endswith("pref_id=pref-1")
        assert data["provider_preference_id"] == "pref-1"
        assert data["status"] == "pending"
        assert data["intent_id"]

    def test_client_amount_ignored(
        self, staff_client, member, payment_config, connection, mock_mp_checkout
    ):
        """An amount in the request never reaches the provider."""
        response = staff_client.post(
            INTENT_URL, intent_body(member, amount="1.00"), format="json"
        )

        assert response.status_code == 200
        params = mock_mp_checkout.call_args.args[0]
        assert params.amount == Decimal("15000.00")

    def test_already_paid_returns_409(
        self, staff_client, member, payment_config, connection, mock_mp_checkout
    ):
        PaymentFactory(member=member, period="2024-05")

        response = staff_client.post(INTENT_URL, intent_body(member), format="json")

        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_PAID"
        assert PaymentIntent.objects.count() == 0

    def test_currency_mismatch_returns_400(
        self, staff_client, member, payment_config, connection, mock_mp_checkout
    ):
        response = staff_client.post(
            INTENT_URL, intent_body(member, currency="USD"), format="json"
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "CURRENCY_MISMATCH"
        mock_mp_checkout.assert_not_called()

    def test_not_configured_returns_400(self, staff_client, member, connection):
        response = staff_client.post(INTENT_URL, intent_body(member), format="json")

        assert response.status_code == 400
        assert response.json()["error_code"] == "PAYMENT_NOT_CONFIGURED"

    def test_not_connected_returns_400(self, staff_client, member, payment_config):
        response = staff_client.post(INTENT_URL, intent_body(member), format="json")

        assert response.status_code == 400
        assert response.json()["error_code"] == "PROVIDER_NOT_CONNECTED"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"period": "2024-13"},
            {"period": "next month"},
            {"provider": "manual"},
            {"member_id": "not-a-uuid"},
        ],
    )
    def test_invalid_input_returns_400(self, staff_client, member, overrides):
        response = staff_client.post(INTENT_URL, intent_body(member, **overrides), format="json")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_member_of_other_tenant_returns_400(
        self, staff_client, tenant, other_tenant, payment_config, connection
    ):
        outsider = MemberFactory(tenant=other_tenant)

        response = staff_client.post(
            INTENT_URL,
            intent_body(outsider, tenant_id=str(tenant.id)),
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "MEMBER_NOT_IN_TENANT"


# =============================================================================
# Manual payments
# =============================================================================


@pytest.mark.django_db
class TestManualPaymentView:
    def test_records_payment(self, staff_client, member, mock_email_delay):
        response = staff_client.post(
            MANUAL_URL,
            {
                "member_id": str(member.id),
                "tenant_id": str(member.tenant_id),
                "period": "registration",
                "amount": "5000.00",
            },
            format="json",
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "approved"
        assert data["paid_at"]
        payment = Payment.objects.get(pk=data["payment_id"])
        assert payment.provider == PaymentProvider.MANUAL
        assert payment.currency == "ARS"

    def test_duplicate_returns_409(self, staff_client, member):
        PaymentFactory(member=member, period="2024-05")

        response = staff_client.post(
            MANUAL_URL,
            {
                "member_id": str(member.id),
                "tenant_id": str(member.tenant_id),
                "period": "2024-05",
                "amount": "5000.00",
            },
            format="json",
        )

        assert response.status_code == 409

    def test_non_positive_amount_rejected(self, staff_client, member):
        response = staff_client.post(
            MANUAL_URL,
            {
                "member_id": str(member.id),
                "tenant_id": str(member.tenant_id),
                "period": "2024-05",
                "amount": "0",
            },
            format="json",
        )

        assert response.status_code == 400


# =============================================================================
# Listing
# =============================================================================


@pytest.mark.django_db
class TestPaymentListView:
    def test_lists_tenant_payments(self, staff_client, member, other_tenant):
        payment = PaymentFactory(member=member)
        PaymentFactory(member=MemberFactory(tenant=other_tenant))

        response = staff_client.get(LIST_URL, {"tenant_id": str(member.tenant_id)})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["limit"] == 50
        assert data["offset"] == 0
        assert data["payments"][0]["id"] == str(payment.id)
        assert data["payments"][0]["member_name"] == member.display_name

    def test_filters_by_period(self, staff_client, member):
        PaymentFactory(member=member, period="2024-04")
        PaymentFactory(member=member, period="2024-05")

        response = staff_client.get(
            LIST_URL, {"tenant_id": str(member.tenant_id), "period": "2024-04"}
        )

        assert [p["period"] for p in response.json()["payments"]] == ["2024-04"]

    def test_rejects_inverted_date_range(self, staff_client, tenant):
        response = staff_client.get(
            LIST_URL,
            {"tenant_id": str(tenant.id), "date_from": "2024-06-01", "date_to": "2024-05-01"},
        )

        assert response.status_code == 400

    def test_missing_tenant_returns_400(self, staff_client):
        response = staff_client.get(LIST_URL)
        assert response.status_code == 400


@pytest.mark.django_db
class TestDelinquentListView:
    @freeze_time("2024-06-15 12:00:00")
    def test_lists_delinquents(self, api_client, staff_user, tenant, payment_config):
        # Tokens issued outside frozen time would fail the iat check
        api_client.force_authenticate(user=staff_user)
        member = MemberFactory(
            tenant=tenant, joined_at=timezone.make_aware(datetime(2024, 1, 5))
        )
        for period in ["registration", "2024-01", "2024-02", "2024-03", "2024-04"]:
            PaymentFactory(member=member, period=period)

        response = api_client.get(DELINQUENTS_URL, {"tenant_id": str(tenant.id)})

        assert response.status_code == 200
        (row,) = response.json()["delinquents"]
        assert row["member_id"] == str(member.id)
        assert row["period"] == "2024-05"
        assert row["due_date"] == "2024-05-10"
        assert row["days_overdue"] == 36

    def test_database_unavailable_returns_503(self, staff_client, tenant):
        with patch(
            "payments.services.delinquency.get_payment_config",
            side_effect=OperationalError("connection refused"),
        ):
            response = staff_client.get(DELINQUENTS_URL, {"tenant_id": str(tenant.id)})

        assert response.status_code == 503


# =============================================================================
# Provider connection
# =============================================================================


@pytest.mark.django_db
class TestProviderViews:
    def test_connect_returns_consent_url(self, staff_client, tenant):
        response = staff_client.get(CONNECT_URL, {"tenant_id": str(tenant.id)})

        assert response.status_code == 200
        url = response.json()["redirect_url"]
        assert url.startswith("https://auth.mercadopago.com/authorization?")
        state = parse_qs(urlparse(url).query)["state"][0]
        assert state.startswith(f"{tenant.id}.")

    def test_connect_disabled_returns_503(self, staff_client, tenant, settings):
        settings.MERCADOPAGO_CLIENT_SECRET = ""

        response = staff_client.get(CONNECT_URL, {"tenant_id": str(tenant.id)})

        assert response.status_code == 503

    def test_status(self, staff_client, connection):
        response = staff_client.get(STATUS_URL, {"tenant_id": str(connection.tenant_id)})

        assert response.status_code == 200
        assert response.json()["connected"] is True
        assert "access_token" not in response.json()

    def test_callback_success_redirects(self, api_client, tenant):
        state = OAuthStateSigner.from_settings().sign_state(str(tenant.id))

        with patch(
            "payments.adapters.mercadopago_adapter.MercadoPagoAdapter.exchange_code",
            return_value=TokenExchangeResult(access_token="APP_USR-x", refresh_token="TG-x"),
        ):
            response = api_client.get(CALLBACK_URL, {"code": "auth-code", "state": state})

        assert response.status_code == 302
        assert response["Location"] == (
            "https://dues.example.com/dashboard/payments?tab=config&mercadopago=connected"
        )
        assert ProviderConnection.objects.filter(tenant=tenant).exists()

    def test_callback_expired_state_redirects_with_error(self, api_client, tenant):
        """A state issued eleven minutes ago stores no tokens."""
        with freeze_time("2024-06-15 12:00:00"):
            state = OAuthStateSigner.from_settings().sign_state(str(tenant.id))

        with freeze_time("2024-06-15 12:11:00"), patch(
            "payments.adapters.mercadopago_adapter.MercadoPagoAdapter.exchange_code"
        ) as mock_exchange:
            response = api_client.get(CALLBACK_URL, {"code": "auth-code", "state": state})

        assert response.status_code == 302
        query = parse_qs(urlparse(response["Location"]).query)
        assert query["mercadopago"] == ["error"]
        assert query["message"]
        mock_exchange.assert_not_called()
        assert ProviderConnection.objects.count() == 0

    def test_callback_missing_code_redirects_with_error(self, api_client):
        response = api_client.get(CALLBACK_URL)

        assert response.status_code == 302
        assert "mercadopago=error" in response["Location"]

    def test_callback_unexpected_error_redirects(self, api_client, tenant):
        state = OAuthStateSigner.from_settings().sign_state(str(tenant.id))

        with patch(
            "payments.adapters.mercadopago_adapter.MercadoPagoAdapter.exchange_code",
            side_effect=RuntimeError("boom"),
        ):
            response = api_client.get(CALLBACK_URL, {"code": "auth-code", "state": state})

        assert response.status_code == 302
        assert "mercadopago=error" in response["Location"]
        assert "boom" not in response["Location"]
