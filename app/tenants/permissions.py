"""
DRF permission classes for tenant staff endpoints.

The tenant is read from the query string for safe methods and from the
request body otherwise. A request without a tenant_id passes this check
so the view can answer 400 from its own validation.

Views that act on a validated tenant_id call require_tenant_staff()
again, so the tenant that is checked is always the tenant that is used.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.permissions import SAFE_METHODS, BasePermission

from core.exceptions import PermissionDeniedError, ValidationError
from tenants.services import StaffAccess


def tenant_id_from_request(request) -> str | None:
    """
    The tenant_id a request claims to act on.

    Raises:
        ValidationError: A body request whose ?tenant_id= disagrees with
            the body's tenant_id
    """
    query_tenant_id = request.query_params.get("tenant_id") or None
    if request.method in SAFE_METHODS:
        return query_tenant_id

    body_tenant_id = None
    if isinstance(request.data, dict):
        body_tenant_id = request.data.get("tenant_id") or None
    if query_tenant_id and body_tenant_id and str(query_tenant_id) != str(body_tenant_id):
        raise ValidationError(
            "tenant_id in the query string does not match the request body.",
            error_code="TENANT_MISMATCH",
        )
    return body_tenant_id or query_tenant_id


def require_tenant_staff(user, tenant_id) -> None:
    """
    Raises:
        PermissionDeniedError: The user is not staff of the tenant
    """
    if not StaffAccess.can_manage(user, tenant_id):
        raise PermissionDeniedError(
            "You do not have staff access to this tenant.",
            details={"tenant_id": str(tenant_id)},
        )


class IsTenantStaff(BasePermission):
    """Allow access only to staff of the tenant named in the request."""

    message = "You do not have staff access to this tenant."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False

        try:
            tenant_id = tenant_id_from_request(request)
        except ValidationError:
            # Mismatch: the view rejects it with 400
            return True
        if tenant_id is None:
            return True

        try:
            return StaffAccess.can_manage(user, tenant_id)
        except DjangoValidationError:
            # Malformed UUID: let the serializer report it
            return True
