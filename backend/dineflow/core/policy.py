"""
Role Policy

Centralized role-based access control for DineFlow.

Every role-dependent decision lives here as a fixed table keyed by
``UserRole``:

- which order statuses a role may advance FROM
- which entity permissions a role holds
- which pages a role can see, and which dashboard it lands on

Each table must cover every role. ``_assert_exhaustive`` runs at import
time, so adding a role without updating all tables fails at startup
instead of silently denying (or granting) access.

Roles:
- owner: business setup, reports, staff; sees the manager dashboard
- manager: dispatches and advances orders through every stage
- cashier: takes orders, confirms them, produces bills
- chef: kitchen queue, moves orders through preparation
- staff: floor service, serves and completes orders
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set

from dineflow.core.exceptions import AuthorizationError, ConflictError


class UserRole(str, Enum):
    """User roles for RBAC."""

    OWNER = "owner"
    MANAGER = "manager"
    CASHIER = "cashier"
    CHEF = "chef"
    STAFF = "staff"


class OrderStatus(str, Enum):
    """Order lifecycle states, in fulfilment order."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PREPARING = "Preparing"
    READY = "Ready"
    SERVED = "Served"
    COMPLETED = "Completed"


STATUS_FLOW: List[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.SERVED,
    OrderStatus.COMPLETED,
]

ACTIVE_STATUSES: FrozenSet[OrderStatus] = frozenset(STATUS_FLOW[:-1])
KITCHEN_STATUSES: FrozenSet[OrderStatus] = frozenset({OrderStatus.CONFIRMED, OrderStatus.PREPARING})


def next_status(current: OrderStatus) -> Optional[OrderStatus]:
    """Return the status after ``current``, or None when it is terminal."""
    index = STATUS_FLOW.index(OrderStatus(current))
    if index + 1 >= len(STATUS_FLOW):
        return None
    return STATUS_FLOW[index + 1]


# Statuses each role may advance an order FROM.
# The owner does not act on orders directly.
ROLE_ADVANCE_FROM: Dict[UserRole, FrozenSet[OrderStatus]] = {
    UserRole.OWNER: frozenset(),
    UserRole.MANAGER: frozenset({
        OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PREPARING,
        OrderStatus.READY, OrderStatus.SERVED,
    }),
    UserRole.CASHIER: frozenset({OrderStatus.PENDING}),
    UserRole.CHEF: frozenset({OrderStatus.CONFIRMED, OrderStatus.PREPARING}),
    UserRole.STAFF: frozenset({OrderStatus.READY, OrderStatus.SERVED}),
}


class Permission(str, Enum):
    """Entity permissions."""
    # Orders
    ORDER_VIEW = "order:view"
    ORDER_CREATE = "order:create"

    # Kitchen
    KITCHEN_VIEW = "kitchen:view"

    # Tables
    TABLE_VIEW = "table:view"
    TABLE_MANAGE = "table:manage"
    TABLE_STATUS = "table:status"

    # Menu
    MENU_VIEW = "menu:view"
    MENU_EDIT = "menu:edit"

    # Bookings
    BOOKING_MANAGE = "booking:manage"

    # Bills
    BILL_VIEW = "bill:view"
    BILL_CREATE = "bill:create"
    BILL_DELETE = "bill:delete"

    # Reports
    REPORTS_VIEW = "reports:view"

    # Staff
    STAFF_MANAGE = "staff:manage"

    # Business
    BUSINESS_MANAGE = "business:manage"


_FRONT_OF_HOUSE: Set[Permission] = {
    Permission.ORDER_VIEW, Permission.ORDER_CREATE,
    Permission.TABLE_VIEW, Permission.TABLE_STATUS,
    Permission.MENU_VIEW,
    Permission.BOOKING_MANAGE,
    Permission.BILL_VIEW,
}

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Permission]] = {
    UserRole.OWNER: frozenset({
        Permission.ORDER_VIEW,
        Permission.KITCHEN_VIEW,
        Permission.TABLE_VIEW, Permission.TABLE_MANAGE, Permission.TABLE_STATUS,
        Permission.MENU_VIEW, Permission.MENU_EDIT,
        Permission.BOOKING_MANAGE,
        Permission.BILL_VIEW, Permission.BILL_CREATE, Permission.BILL_DELETE,
        Permission.REPORTS_VIEW,
        Permission.STAFF_MANAGE,
        Permission.BUSINESS_MANAGE,
    }),
    UserRole.MANAGER: frozenset(_FRONT_OF_HOUSE | {
        Permission.KITCHEN_VIEW,
        Permission.TABLE_MANAGE,
        Permission.MENU_EDIT,
        Permission.BILL_CREATE, Permission.BILL_DELETE,
        Permission.REPORTS_VIEW,
        Permission.STAFF_MANAGE,
    }),
    UserRole.CASHIER: frozenset(_FRONT_OF_HOUSE | {
        Permission.TABLE_MANAGE,
        Permission.BILL_CREATE, Permission.BILL_DELETE,
        Permission.STAFF_MANAGE,
    }),
    UserRole.CHEF: frozenset({
        Permission.ORDER_VIEW,
        Permission.KITCHEN_VIEW,
        Permission.TABLE_VIEW,
        Permission.MENU_VIEW,
    }),
    UserRole.STAFF: frozenset(_FRONT_OF_HOUSE),
}

# Roles each role may add to or remove from the roster. Owners are never managed.
ROLE_MAY_MANAGE: Dict[UserRole, FrozenSet[UserRole]] = {
    UserRole.OWNER: frozenset({UserRole.MANAGER, UserRole.CASHIER, UserRole.CHEF, UserRole.STAFF}),
    UserRole.MANAGER: frozenset({UserRole.CASHIER, UserRole.CHEF, UserRole.STAFF}),
    UserRole.CASHIER: frozenset({UserRole.STAFF}),
    UserRole.CHEF: frozenset(),
    UserRole.STAFF: frozenset(),
}


class Page(str, Enum):
    """Navigable pages of the user-facing surface."""

    DASHBOARD = "dashboard"
    KITCHEN = "kitchen"
    TABLES = "tables"
    MENU = "menu"
    ORDERS = "orders"
    BOOKINGS = "bookings"
    BILLS = "bills"
    REPORTS = "reports"
    STAFF = "staff"


class DashboardView(str, Enum):
    """Landing dashboard variants."""

    MANAGER = "manager"
    KITCHEN = "kitchen"
    WAITER = "waiter"


_MANAGEMENT_PAGES = (
    Page.DASHBOARD, Page.TABLES, Page.MENU, Page.ORDERS,
    Page.BOOKINGS, Page.BILLS, Page.REPORTS, Page.STAFF,
)

ROLE_PAGES: Dict[UserRole, tuple] = {
    UserRole.OWNER: _MANAGEMENT_PAGES,
    UserRole.MANAGER: _MANAGEMENT_PAGES,
    UserRole.CASHIER: (
        Page.DASHBOARD, Page.TABLES, Page.MENU, Page.ORDERS,
        Page.BOOKINGS, Page.BILLS, Page.STAFF,
    ),
    UserRole.CHEF: (Page.DASHBOARD, Page.KITCHEN, Page.MENU),
    UserRole.STAFF: (
        Page.DASHBOARD, Page.TABLES, Page.MENU, Page.ORDERS,
        Page.BOOKINGS, Page.BILLS,
    ),
}

ROLE_DASHBOARD: Dict[UserRole, DashboardView] = {
    UserRole.OWNER: DashboardView.MANAGER,
    UserRole.MANAGER: DashboardView.MANAGER,
    UserRole.CASHIER: DashboardView.MANAGER,
    UserRole.CHEF: DashboardView.KITCHEN,
    UserRole.STAFF: DashboardView.WAITER,
}


def _assert_exhaustive() -> None:
    tables = {
        "ROLE_ADVANCE_FROM": ROLE_ADVANCE_FROM,
        "ROLE_PERMISSIONS": ROLE_PERMISSIONS,
        "ROLE_MAY_MANAGE": ROLE_MAY_MANAGE,
        "ROLE_PAGES": ROLE_PAGES,
        "ROLE_DASHBOARD": ROLE_DASHBOARD,
    }
    for name, table in tables.items():
        missing = set(UserRole) - set(table)
        if missing:
            raise RuntimeError(
                f"{name} has no entry for roles: {sorted(r.value for r in missing)}"
            )
    for role, statuses in ROLE_ADVANCE_FROM.items():
        if OrderStatus.COMPLETED in statuses:
            raise RuntimeError(f"{role.value} may not advance from the terminal status")
    for role, managed in ROLE_MAY_MANAGE.items():
        if UserRole.OWNER in managed:
            raise RuntimeError(f"{role.value} may not manage owner accounts")


_assert_exhaustive()


class RBACPolicy:
    """
    Pure predicates over the role tables above.

    Nothing here touches storage; callers consult the policy before
    every mutation and write only when it allows.
    """

    @staticmethod
    def can_advance(role: UserRole, current: OrderStatus) -> bool:
        """Whether ``role`` may move an order out of ``current``."""
        return OrderStatus(current) in ROLE_ADVANCE_FROM[UserRole(role)]

    @staticmethod
    def authorize_advance(role: UserRole, current: OrderStatus) -> OrderStatus:
        """Return the permitted next status or raise.

        Raises:
            ConflictError: the order is already terminal.
            AuthorizationError: the role may not advance from ``current``.
        """
        current = OrderStatus(current)
        target = next_status(current)
        if target is None:
            raise ConflictError("Order is already completed")
        if not RBACPolicy.can_advance(role, current):
            raise AuthorizationError(
                f"Role '{UserRole(role).value}' cannot advance an order from {current.value}"
            )
        return target

    @staticmethod
    def get_role_permissions(role: UserRole) -> FrozenSet[Permission]:
        return ROLE_PERMISSIONS[UserRole(role)]

    @staticmethod
    def has_permission(role: UserRole, permission: Permission) -> bool:
        """Check if role has specific permission."""
        return permission in RBACPolicy.get_role_permissions(role)

    @staticmethod
    def require(role: UserRole, permission: Permission) -> None:
        """Raise AuthorizationError unless role holds permission."""
        if not RBACPolicy.has_permission(role, permission):
            raise AuthorizationError(
                f"Role '{UserRole(role).value}' lacks permission {permission.value}"
            )

    @staticmethod
    def visible_pages(role: UserRole) -> List[Page]:
        return list(ROLE_PAGES[UserRole(role)])

    @staticmethod
    def can_view_page(role: UserRole, page: Page) -> bool:
        return Page(page) in ROLE_PAGES[UserRole(role)]

    @staticmethod
    def dashboard_for(role: UserRole) -> DashboardView:
        return ROLE_DASHBOARD[UserRole(role)]

    @staticmethod
    def can_manage_role(role: UserRole, target: UserRole) -> bool:
        """Whether ``role`` may add or remove a roster member holding ``target``."""
        return UserRole(target) in ROLE_MAY_MANAGE[UserRole(role)]

    @staticmethod
    def require_manage_role(role: UserRole, target: UserRole) -> None:
        if not RBACPolicy.can_manage_role(role, target):
            raise AuthorizationError(
                f"Role '{UserRole(role).value}' cannot manage {UserRole(target).value} accounts"
            )
