"""Capability policy.

Role defaults:
┌─────────────────────────┬───────┬─────────┬─────────┬──────────┐
│ Capability              │ Admin │ Manager │ Cashier │ Employee │
├─────────────────────────┼───────┼─────────┼─────────┼──────────┤
│ manage_users            │  ✓    │         │         │          │
│ manage_employees        │  ✓    │   ✓     │         │          │
│ manage_inventory        │  ✓    │   ✓     │         │          │
│ delete_inventory        │  ✓    │         │         │          │
│ manage_locations        │  ✓    │   ✓     │         │          │
│ manage_customers        │  ✓    │   ✓     │   ✓     │          │
│ delete_customers        │  ✓    │   ✓     │         │          │
│ manage_sales            │  ✓    │   ✓     │   ✓     │          │
│ process_payments        │  ✓    │   ✓     │   ✓     │          │
│ process_refunds         │  ✓    │   ✓     │         │          │
│ view_reports            │  ✓    │   ✓     │         │          │
│ view_financial_reports  │  ✓    │   ✓     │         │          │
│ manage_settings         │  ✓    │         │         │          │
│ send_notifications      │  ✓    │   ✓     │   ✓     │          │
│ manage_partners         │  ✓    │   ✓     │         │          │
└─────────────────────────┴───────┴─────────┴─────────┴──────────┘

Admin passes every check regardless of the table. A user's ``permissions``
JSON object (``{"view_reports": true}``) grants extra capabilities.
"""

from collections.abc import Iterable, Mapping

from app.models.role import Capability, Role

_ADMIN_ONLY = {Capability.MANAGE_USERS, Capability.DELETE_INVENTORY, Capability.MANAGE_SETTINGS}

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.MANAGER: frozenset(set(Capability) - _ADMIN_ONLY),
    Role.CASHIER: frozenset(
        {
            Capability.MANAGE_CUSTOMERS,
            Capability.MANAGE_SALES,
            Capability.PROCESS_PAYMENTS,
            Capability.SEND_NOTIFICATIONS,
        }
    ),
    Role.EMPLOYEE: frozenset(),
}


def parse_grants(raw: Mapping | None) -> frozenset[Capability]:
    """Capabilities explicitly set to ``true`` in a stored permissions object."""
    if not raw:
        return frozenset()
    grants = set()
    for name, enabled in raw.items():
        if enabled is not True:
            continue
        try:
            grants.add(Capability(name))
        except ValueError:
            continue  # unknown names are ignored
    return frozenset(grants)


class PermissionPolicy:
    """Single entry point for every authorization decision."""

    def capabilities(self, role: Role | str, grants: Iterable[Capability] = ()) -> frozenset[Capability]:
        role = Role(role)
        return ROLE_CAPABILITIES[role] | frozenset(grants)

    def allows(self, user, *required: Capability) -> bool:
        """True when ``user`` is admin or holds ANY of ``required``."""
        if Role(user.role) is Role.ADMIN:
            return True
        if not required:
            return True
        held = set(user.capabilities)
        return any(cap in held for cap in required)

    def has_role(self, user, *roles: Role) -> bool:
        return Role(user.role) in roles


policy = PermissionPolicy()
