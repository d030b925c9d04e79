"""
Tenant-scoped lookups used by the payments domain.

Usage:
    from tenants.services import MemberDirectory, StaffAccess

    member = MemberDirectory.get_member_in_tenant(tenant_id, member_id)
    if member is None:
        ...  # forged or stale payload

    if not StaffAccess.can_manage(request.user, tenant_id):
        ...
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError

from core.services import BaseService
from tenants.models import Member, StaffMembership

logger = logging.getLogger(__name__)


class MemberDirectory(BaseService):
    """Read access to members, always scoped by tenant."""

    @staticmethod
    def get_member_in_tenant(tenant_id, member_id) -> Member | None:
        """
        Return the member only if it belongs to the given tenant.

        A member id that exists under another tenant returns None, which
        is how forged cross-tenant payloads are rejected.
        """
        try:
            return (
                Member.objects.select_related("category", "tenant")
                .filter(tenant_id=tenant_id, id=member_id)
                .first()
            )
        except DjangoValidationError:
            # Malformed UUID
            return None


class StaffAccess(BaseService):
    """Authorization checks for tenant staff."""

    @staticmethod
    def can_manage(user, tenant_id) -> bool:
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        return StaffMembership.objects.filter(user=user, tenant_id=tenant_id).exists()

    @staticmethod
    def display_name_for(user, tenant_id) -> str:
        """
        Name recorded on manual payments as the collector.

        Falls back to the user's email when the membership has no name.
        """
        membership = StaffMembership.objects.filter(
            user=user, tenant_id=tenant_id
        ).first()
        if membership and membership.display_name.strip():
            return membership.display_name.strip()
        return getattr(user, "email", "") or "User"
