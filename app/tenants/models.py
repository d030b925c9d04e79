"""
Tenant domain models.

Models:
    Tenant: An independently managed organization sharing the platform
    Category: Member grouping inside a tenant (used for category pricing)
    Member: A payer-tracked individual belonging to a tenant
    StaffMembership: Grants a user staff access to one tenant

Usage:
    from tenants.models import Member, MemberStatus

    member = Member.objects.for_tenant(tenant_id).get(id=member_id)
    if member.status == MemberStatus.SUSPENDED:
        member.reactivate()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin


class MemberStatus(models.TextChoices):
    """
    Status of a member inside a tenant.

    ACTIVE and SUSPENDED members still owe dues; INACTIVE members left
    the tenant and are ignored by delinquency computation.
    """

    ACTIVE = "active", "Active"
    SUSPENDED = "suspended", "Suspended"
    INACTIVE = "inactive", "Inactive"


class StaffRole(models.TextChoices):
    """Role a staff user holds inside a tenant."""

    ADMIN = "tenant_admin", "Tenant Admin"
    COACH = "coach", "Coach"


class Tenant(UUIDPrimaryKeyMixin, BaseModel):
    """
    An independently managed organization.

    Fields:
        name: Display name
        is_active: Whether the tenant is operating on the platform
    """

    name = models.CharField(
        max_length=200,
        help_text="Display name of the organization",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether the tenant is operating on the platform",
    )

    class Meta:
        ordering = ["name"]
        verbose_name = "Tenant"
        verbose_name_plural = "Tenants"

    def __str__(self) -> str:
        return self.name


class Category(UUIDPrimaryKeyMixin, BaseModel):
    """Member grouping inside a tenant (e.g. an age bracket)."""

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name="categories",
        help_text="Tenant this category belongs to",
    )

    name = models.CharField(
        max_length=100,
        help_text="Category name (e.g. 'U8')",
    )

    class Meta:
        ordering = ["name"]
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "name"],
                name="unique_category_name_per_tenant",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.tenant_id})"


class MemberQuerySet(models.QuerySet):
    """QuerySet helpers for tenant-scoped member lookups."""

    def for_tenant(self, tenant_id):
        return self.filter(tenant_id=tenant_id)

    def billable(self):
        """Members that still owe dues (active or suspended)."""
        return self.exclude(status=MemberStatus.INACTIVE)


class Member(UUIDPrimaryKeyMixin, BaseModel):
    """
    A payer-tracked individual belonging to a tenant.

    Fields:
        tenant: Owning tenant; every payment lookup is scoped by it
        category: Optional category, used for category-specific pricing
        first_name / last_name: Display name
        email: Contact address for receipts and notices (optional)
        status: active, suspended or inactive
        joined_at: When the member joined; the registration obligation is
            due on this date and monthly dues start in this month
    """

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.PROTECT,
        related_name="members",
        help_text="Tenant this member belongs to",
    )

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="members",
        help_text="Category used for category-specific pricing",
    )

    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)

    email = models.EmailField(
        blank=True,
        help_text="Contact address for receipts and notices",
    )

    status = models.CharField(
        max_length=20,
        choices=MemberStatus.choices,
        default=MemberStatus.ACTIVE,
        db_index=True,
        help_text="Current membership status",
    )

    joined_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the member joined the tenant",
    )

    objects = MemberQuerySet.as_manager()

    class Meta:
        ordering = ["last_name", "first_name"]
        verbose_name = "Member"
        verbose_name_plural = "Members"
        indexes = [
            models.Index(fields=["tenant", "status"], name="member_tenant_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Member({self.full_name or self.pk})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        return self.full_name or "Member"

    def reactivate(self) -> bool:
        """
        Clear a suspension.

        Uses a conditional UPDATE so concurrent callers do not clobber
        each other. Returns True if the member was suspended.
        """
        updated = Member.objects.filter(
            pk=self.pk, status=MemberStatus.SUSPENDED
        ).update(status=MemberStatus.ACTIVE, updated_at=timezone.now())
        if updated:
            self.status = MemberStatus.ACTIVE
        return bool(updated)

    def suspend(self) -> bool:
        """
        Suspend an active member.

        Returns True if the member was active.
        """
        updated = Member.objects.filter(
            pk=self.pk, status=MemberStatus.ACTIVE
        ).update(status=MemberStatus.SUSPENDED, updated_at=timezone.now())
        if updated:
            self.status = MemberStatus.SUSPENDED
        return bool(updated)


class StaffMembership(BaseModel):
    """
    Grants a user staff access to a tenant.

    Staff can create intents, record manual payments, list delinquents
    and connect the tenant's payment provider account.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="staff_memberships",
    )

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name="staff_memberships",
    )

    role = models.CharField(
        max_length=20,
        choices=StaffRole.choices,
        default=StaffRole.ADMIN,
    )

    display_name = models.CharField(
        max_length=150,
        blank=True,
        help_text="Name shown on receipts for payments this user collects",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Staff Membership"
        verbose_name_plural = "Staff Memberships"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "tenant"],
                name="unique_staff_membership",
            ),
        ]

    def __str__(self) -> str:
        return f"StaffMembership({self.user_id}, {self.tenant_id}, {self.role})"
