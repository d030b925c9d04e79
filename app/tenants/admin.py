"""
Tenant admin configuration.
"""

from django.contrib import admin

from tenants.models import Category, Member, StaffMembership, Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ["name", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name"]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "tenant"]
    search_fields = ["name", "tenant__name"]


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ["full_name", "tenant", "category", "email", "status", "joined_at"]
    list_filter = ["status", "tenant"]
    search_fields = ["first_name", "last_name", "email"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(StaffMembership)
class StaffMembershipAdmin(admin.ModelAdmin):
    list_display = ["user", "tenant", "role", "display_name"]
    list_filter = ["role"]
    search_fields = ["user__email", "tenant__name"]
