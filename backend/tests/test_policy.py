"""Tests for the role policy: advancement rules, permissions, pages and dashboards."""

import pytest

from dineflow.core.exceptions import AuthorizationError, ConflictError
from dineflow.core.policy import (
    ACTIVE_STATUSES,
    KITCHEN_STATUSES,
    ROLE_ADVANCE_FROM,
    ROLE_DASHBOARD,
    ROLE_MAY_MANAGE,
    ROLE_PAGES,
    ROLE_PERMISSIONS,
    STATUS_FLOW,
    DashboardView,
    OrderStatus,
    Page,
    Permission,
    RBACPolicy,
    UserRole,
    next_status,
)


# ============== Status sequence ==============

class TestStatusFlow:
    def test_sequence_order(self):
        assert [s.value for s in STATUS_FLOW] == [
            "Pending", "Confirmed", "Preparing", "Ready", "Served", "Completed",
        ]

    def test_next_status_steps_forward(self):
        assert next_status(OrderStatus.PENDING) == OrderStatus.CONFIRMED
        assert next_status(OrderStatus.SERVED) == OrderStatus.COMPLETED

    def test_completed_is_terminal(self):
        assert next_status(OrderStatus.COMPLETED) is None

    def test_next_status_accepts_plain_strings(self):
        assert next_status("Ready") == OrderStatus.SERVED

    def test_active_and_kitchen_sets(self):
        assert OrderStatus.COMPLETED not in ACTIVE_STATUSES
        assert len(ACTIVE_STATUSES) == 5
        assert KITCHEN_STATUSES == {OrderStatus.CONFIRMED, OrderStatus.PREPARING}


# ============== Advancement ==============

ALLOWED = {
    UserRole.OWNER: set(),
    UserRole.MANAGER: {
        OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PREPARING,
        OrderStatus.READY, OrderStatus.SERVED,
    },
    UserRole.CASHIER: {OrderStatus.PENDING},
    UserRole.CHEF: {OrderStatus.CONFIRMED, OrderStatus.PREPARING},
    UserRole.STAFF: {OrderStatus.READY, OrderStatus.SERVED},
}


class TestAdvancement:
    @pytest.mark.parametrize("role", list(UserRole))
    def test_can_advance_matches_role_table(self, role):
        for status in STATUS_FLOW:
            assert RBACPolicy.can_advance(role, status) == (status in ALLOWED[role])

    def test_authorize_returns_next_status(self):
        assert RBACPolicy.authorize_advance(UserRole.CHEF, OrderStatus.CONFIRMED) == OrderStatus.PREPARING
        assert RBACPolicy.authorize_advance(UserRole.STAFF, OrderStatus.SERVED) == OrderStatus.COMPLETED

    def test_cashier_cannot_advance_confirmed(self):
        with pytest.raises(AuthorizationError):
            RBACPolicy.authorize_advance(UserRole.CASHIER, OrderStatus.CONFIRMED)

    def test_owner_cannot_advance_anything(self):
        for status in STATUS_FLOW[:-1]:
            with pytest.raises(AuthorizationError):
                RBACPolicy.authorize_advance(UserRole.OWNER, status)

    @pytest.mark.parametrize("role", list(UserRole))
    def test_completed_raises_conflict_for_every_role(self, role):
        with pytest.raises(ConflictError):
            RBACPolicy.authorize_advance(role, OrderStatus.COMPLETED)

    def test_no_role_may_leave_completed(self):
        for statuses in ROLE_ADVANCE_FROM.values():
            assert OrderStatus.COMPLETED not in statuses


# ============== Permissions ==============

class TestPermissions:
    def test_every_role_has_every_table_entry(self):
        for table in (ROLE_ADVANCE_FROM, ROLE_PERMISSIONS, ROLE_MAY_MANAGE, ROLE_PAGES, ROLE_DASHBOARD):
            assert set(table) == set(UserRole)

    def test_owner_manages_business(self):
        assert RBACPolicy.has_permission(UserRole.OWNER, Permission.BUSINESS_MANAGE)
        assert not RBACPolicy.has_permission(UserRole.MANAGER, Permission.BUSINESS_MANAGE)

    def test_owner_does_not_take_orders(self):
        assert not RBACPolicy.has_permission(UserRole.OWNER, Permission.ORDER_CREATE)

    def test_chef_is_kitchen_only(self):
        assert RBACPolicy.has_permission(UserRole.CHEF, Permission.KITCHEN_VIEW)
        assert not RBACPolicy.has_permission(UserRole.CHEF, Permission.ORDER_CREATE)
        assert not RBACPolicy.has_permission(UserRole.CHEF, Permission.BILL_CREATE)

    def test_staff_cannot_bill_or_report(self):
        assert not RBACPolicy.has_permission(UserRole.STAFF, Permission.BILL_CREATE)
        assert not RBACPolicy.has_permission(UserRole.STAFF, Permission.REPORTS_VIEW)

    def test_require_raises_authorization_error(self):
        with pytest.raises(AuthorizationError):
            RBACPolicy.require(UserRole.CHEF, Permission.MENU_EDIT)

    def test_require_passes_silently(self):
        RBACPolicy.require(UserRole.MANAGER, Permission.MENU_EDIT)

    def test_cashier_manages_tables(self):
        assert RBACPolicy.has_permission(UserRole.CASHIER, Permission.TABLE_MANAGE)
        assert not RBACPolicy.has_permission(UserRole.STAFF, Permission.TABLE_MANAGE)


# ============== Staff hierarchy ==============

class TestStaffHierarchy:
    @pytest.mark.parametrize("role,allowed", [
        (UserRole.OWNER, {UserRole.MANAGER, UserRole.CASHIER, UserRole.CHEF, UserRole.STAFF}),
        (UserRole.MANAGER, {UserRole.CASHIER, UserRole.CHEF, UserRole.STAFF}),
        (UserRole.CASHIER, {UserRole.STAFF}),
        (UserRole.CHEF, set()),
        (UserRole.STAFF, set()),
    ])
    def test_manageable_roles(self, role, allowed):
        for target in UserRole:
            assert RBACPolicy.can_manage_role(role, target) == (target in allowed)

    @pytest.mark.parametrize("role", list(UserRole))
    def test_nobody_manages_owners(self, role):
        assert not RBACPolicy.can_manage_role(role, UserRole.OWNER)

    def test_require_manage_role_raises(self):
        with pytest.raises(AuthorizationError):
            RBACPolicy.require_manage_role(UserRole.CASHIER, UserRole.MANAGER)


# ============== Pages and dashboards ==============

class TestPagesAndDashboards:
    def test_chef_pages(self):
        assert RBACPolicy.visible_pages(UserRole.CHEF) == [Page.DASHBOARD, Page.KITCHEN, Page.MENU]

    def test_reports_visible_to_management_only(self):
        assert RBACPolicy.can_view_page(UserRole.OWNER, Page.REPORTS)
        assert RBACPolicy.can_view_page(UserRole.MANAGER, Page.REPORTS)
        assert not RBACPolicy.can_view_page(UserRole.CASHIER, Page.REPORTS)
        assert not RBACPolicy.can_view_page(UserRole.STAFF, Page.REPORTS)

    def test_dashboard_variants(self):
        assert RBACPolicy.dashboard_for(UserRole.OWNER) == DashboardView.MANAGER
        assert RBACPolicy.dashboard_for(UserRole.CASHIER) == DashboardView.MANAGER
        assert RBACPolicy.dashboard_for(UserRole.CHEF) == DashboardView.KITCHEN
        assert RBACPolicy.dashboard_for(UserRole.STAFF) == DashboardView.WAITER
