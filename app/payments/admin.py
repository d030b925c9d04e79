"""
Payment admin configuration.

Payments are append-only records of money received; the admin is
read-only for them. Status changes go through the service layer.
"""

from django.contrib import admin

from payments.models import (
    CategoryPricing,
    Payment,
    PaymentConfig,
    PaymentIntent,
    ProviderConnection,
)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Admin configuration for Payment.

    Provides visibility into approved and historical payments.
    """

    list_display = [
        "id",
        "member",
        "tenant",
        "period",
        "amount_display",
        "provider",
        "status",
        "paid_at",
    ]
    list_filter = ["status", "provider", "currency", "created_at"]
    search_fields = ["id", "provider_payment_id", "member__email", "period"]
    readonly_fields = [
        "id",
        "member",
        "tenant",
        "period",
        "amount",
        "currency",
        "provider",
        "provider_payment_id",
        "status",
        "paid_at",
        "metadata",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (None, {"fields": ("id", "member", "tenant", "period", "status")}),
        ("Amount", {"fields": ("amount", "currency")}),
        ("Provider", {"fields": ("provider", "provider_payment_id", "paid_at")}),
        ("Metadata", {"fields": ("metadata",), "classes": ("collapse",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    @admin.display(description="Amount")
    def amount_display(self, obj):
        return f"{obj.amount} {obj.currency}"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PaymentIntent)
class PaymentIntentAdmin(admin.ModelAdmin):
    list_display = ["id", "member", "period", "provider", "status", "created_at"]
    list_filter = ["status", "provider"]
    search_fields = ["id", "provider_preference_id", "member__email"]
    readonly_fields = [
        "id",
        "member",
        "tenant",
        "period",
        "amount",
        "currency",
        "provider",
        "provider_preference_id",
        "checkout_url",
        "status",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False


@admin.register(PaymentConfig)
class PaymentConfigAdmin(admin.ModelAdmin):
    list_display = ["tenant", "amount", "currency", "due_day_of_month", "updated_at"]
    search_fields = ["tenant__name"]


@admin.register(CategoryPricing)
class CategoryPricingAdmin(admin.ModelAdmin):
    list_display = ["tenant", "category", "amount", "currency"]
    list_filter = ["currency"]
    search_fields = ["tenant__name", "category__name"]


@admin.register(ProviderConnection)
class ProviderConnectionAdmin(admin.ModelAdmin):
    """
    Admin configuration for ProviderConnection.

    Tokens are never displayed.
    """

    list_display = ["tenant", "provider", "connected_at", "expires_at"]
    list_filter = ["provider"]
    search_fields = ["tenant__name"]
    fields = ["tenant", "provider", "connected_at", "expires_at"]
    readonly_fields = ["tenant", "provider", "connected_at", "expires_at"]

    def has_add_permission(self, request):
        return False
