"""Admin configuration for the email dedup ledger."""

from django.contrib import admin

from notifications.models import EmailEvent


@admin.register(EmailEvent)
class EmailEventAdmin(admin.ModelAdmin):
    """Read-only view of sent member emails."""

    list_display = ["idempotency_key", "event_type", "recipient", "sent_at"]
    list_filter = ["event_type"]
    search_fields = ["idempotency_key", "recipient"]
    readonly_fields = [
        "event_type",
        "member",
        "tenant",
        "period",
        "recipient",
        "idempotency_key",
        "sent_at",
        "created_at",
        "updated_at",
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
