"""
Tenants app: organizations, member rosters and staff access.

This app holds the collaborators the payments domain depends on:
- Tenant: an independently managed organization (a school or club)
- Category: a grouping of members inside a tenant (e.g. "U8")
- Member: a payer-tracked individual belonging to a tenant
- StaffMembership: grants a user staff access to a tenant

Member and profile CRUD is handled elsewhere; this app only exposes what
payments needs (lookups scoped by tenant, suspension and reactivation).
"""
