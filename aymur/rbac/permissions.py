"""
Permission keys and role default tables.

Permission format:  "{domain}.{action}"  e.g. "sales.create"

Keys match the JSON stored in shop_access.permissions. Every role's
default table covers every key, so a resolved map never has gaps.
"""

from enum import Enum
from typing import Optional

from .roles import Role


class PermissionKey(str, Enum):
    # Inventory
    INVENTORY_VIEW = "inventory.view"
    INVENTORY_MANAGE = "inventory.manage"
    INVENTORY_DELETE = "inventory.delete"
    INVENTORY_TRANSFER = "inventory.transfer"

    # Sales
    SALES_VIEW = "sales.view"
    SALES_CREATE = "sales.create"
    SALES_EDIT = "sales.edit"
    SALES_VOID = "sales.void"
    SALES_DISCOUNT = "sales.discount"
    SALES_REFUND = "sales.refund"

    # Customers
    CUSTOMERS_VIEW = "customers.view"
    CUSTOMERS_MANAGE = "customers.manage"
    CUSTOMERS_DELETE = "customers.delete"
    CUSTOMERS_CREDIT = "customers.credit"

    # Suppliers
    SUPPLIERS_VIEW = "suppliers.view"
    SUPPLIERS_MANAGE = "suppliers.manage"
    SUPPLIERS_DELETE = "suppliers.delete"
    SUPPLIERS_PAYMENTS = "suppliers.payments"

    # Purchases
    PURCHASES_VIEW = "purchases.view"
    PURCHASES_CREATE = "purchases.create"
    PURCHASES_EDIT = "purchases.edit"
    PURCHASES_DELETE = "purchases.delete"

    # Expenses
    EXPENSES_VIEW = "expenses.view"
    EXPENSES_CREATE = "expenses.create"
    EXPENSES_APPROVE = "expenses.approve"
    EXPENSES_DELETE = "expenses.delete"

    # Workshops
    WORKSHOPS_VIEW = "workshops.view"
    WORKSHOPS_MANAGE = "workshops.manage"
    WORKSHOPS_ORDERS = "workshops.orders"
    WORKSHOPS_PAYMENTS = "workshops.payments"

    # Deliveries
    DELIVERIES_VIEW = "deliveries.view"
    DELIVERIES_MANAGE = "deliveries.manage"
    COURIERS_MANAGE = "couriers.manage"

    # Payroll
    PAYROLL_VIEW = "payroll.view"
    PAYROLL_MANAGE = "payroll.manage"
    SALARY_APPROVE = "salary.approve"
    ADVANCES_APPROVE = "advances.approve"

    # Staff management
    STAFF_VIEW = "staff.view"
    STAFF_MANAGE = "staff.manage"
    STAFF_MANAGE_ROLES = "staff.manage_roles"
    STAFF_INVITE = "staff.invite"
    STAFF_REMOVE = "staff.remove"

    # Analytics & reports
    ANALYTICS_VIEW = "analytics.view"
    REPORTS_BASIC = "reports.basic"
    REPORTS_FINANCIAL = "reports.financial"
    REPORTS_EXPORT = "reports.export"

    # Settings
    SETTINGS_VIEW = "settings.view"
    SETTINGS_MANAGE = "settings.manage"
    SHOP_SETTINGS = "shop.settings"

    # AI
    AI_USE = "ai.use"
    AI_APPROVE_OPERATIONS = "ai.approve_operations"

    # Tax
    TAX_VIEW = "tax.view"
    TAX_MANAGE = "tax.manage"

    # Budget
    BUDGET_VIEW = "budget.view"
    BUDGET_MANAGE = "budget.manage"

    # Payment reminders
    REMINDERS_VIEW = "reminders.view"
    REMINDERS_CREATE = "reminders.create"
    REMINDERS_UPDATE = "reminders.update"
    REMINDERS_DELETE = "reminders.delete"


P = PermissionKey


def parse_permission_key(value) -> Optional[PermissionKey]:
    """Return the PermissionKey for `value`, or None if it is not a known key."""
    if isinstance(value, PermissionKey):
        return value
    if not isinstance(value, str):
        return None
    try:
        return PermissionKey(value)
    except ValueError:
        return None


# ── Groups (for settings UI) ─────────────────────────────────────
PERMISSION_GROUPS: dict[str, tuple[PermissionKey, ...]] = {
    "inventory": (P.INVENTORY_VIEW, P.INVENTORY_MANAGE, P.INVENTORY_DELETE, P.INVENTORY_TRANSFER),
    "sales": (
        P.SALES_VIEW, P.SALES_CREATE, P.SALES_EDIT,
        P.SALES_VOID, P.SALES_DISCOUNT, P.SALES_REFUND,
    ),
    "customers": (P.CUSTOMERS_VIEW, P.CUSTOMERS_MANAGE, P.CUSTOMERS_DELETE, P.CUSTOMERS_CREDIT),
    "suppliers": (P.SUPPLIERS_VIEW, P.SUPPLIERS_MANAGE, P.SUPPLIERS_DELETE, P.SUPPLIERS_PAYMENTS),
    "purchases": (P.PURCHASES_VIEW, P.PURCHASES_CREATE, P.PURCHASES_EDIT, P.PURCHASES_DELETE),
    "expenses": (P.EXPENSES_VIEW, P.EXPENSES_CREATE, P.EXPENSES_APPROVE, P.EXPENSES_DELETE),
    "workshops": (P.WORKSHOPS_VIEW, P.WORKSHOPS_MANAGE, P.WORKSHOPS_ORDERS, P.WORKSHOPS_PAYMENTS),
    "deliveries": (P.DELIVERIES_VIEW, P.DELIVERIES_MANAGE, P.COURIERS_MANAGE),
    "payroll": (P.PAYROLL_VIEW, P.PAYROLL_MANAGE, P.SALARY_APPROVE, P.ADVANCES_APPROVE),
    "staff": (
        P.STAFF_VIEW, P.STAFF_MANAGE, P.STAFF_MANAGE_ROLES,
        P.STAFF_INVITE, P.STAFF_REMOVE,
    ),
    "analytics": (P.ANALYTICS_VIEW, P.REPORTS_BASIC, P.REPORTS_FINANCIAL, P.REPORTS_EXPORT),
    "settings": (P.SETTINGS_VIEW, P.SETTINGS_MANAGE, P.SHOP_SETTINGS),
    "ai": (P.AI_USE, P.AI_APPROVE_OPERATIONS),
    "tax": (P.TAX_VIEW, P.TAX_MANAGE),
    "budget": (P.BUDGET_VIEW, P.BUDGET_MANAGE),
    "reminders": (P.REMINDERS_VIEW, P.REMINDERS_CREATE, P.REMINDERS_UPDATE, P.REMINDERS_DELETE),
}


PERMISSION_LABELS: dict[PermissionKey, str] = {
    P.INVENTORY_VIEW: "View Inventory",
    P.INVENTORY_MANAGE: "Manage Inventory",
    P.INVENTORY_DELETE: "Delete Inventory Items",
    P.INVENTORY_TRANSFER: "Transfer Inventory",
    P.SALES_VIEW: "View Sales",
    P.SALES_CREATE: "Create Sales",
    P.SALES_EDIT: "Edit Sales",
    P.SALES_VOID: "Void Sales",
    P.SALES_DISCOUNT: "Apply Discounts",
    P.SALES_REFUND: "Process Refunds",
    P.CUSTOMERS_VIEW: "View Customers",
    P.CUSTOMERS_MANAGE: "Manage Customers",
    P.CUSTOMERS_DELETE: "Delete Customers",
    P.CUSTOMERS_CREDIT: "Manage Customer Credit",
    P.SUPPLIERS_VIEW: "View Suppliers",
    P.SUPPLIERS_MANAGE: "Manage Suppliers",
    P.SUPPLIERS_DELETE: "Delete Suppliers",
    P.SUPPLIERS_PAYMENTS: "Manage Supplier Payments",
    P.PURCHASES_VIEW: "View Purchases",
    P.PURCHASES_CREATE: "Create Purchases",
    P.PURCHASES_EDIT: "Edit Purchases",
    P.PURCHASES_DELETE: "Delete Purchases",
    P.EXPENSES_VIEW: "View Expenses",
    P.EXPENSES_CREATE: "Create Expenses",
    P.EXPENSES_APPROVE: "Approve Expenses",
    P.EXPENSES_DELETE: "Delete Expenses",
    P.WORKSHOPS_VIEW: "View Workshops",
    P.WORKSHOPS_MANAGE: "Manage Workshops",
    P.WORKSHOPS_ORDERS: "Manage Workshop Orders",
    P.WORKSHOPS_PAYMENTS: "Manage Workshop Payments",
    P.DELIVERIES_VIEW: "View Deliveries",
    P.DELIVERIES_MANAGE: "Manage Deliveries",
    P.COURIERS_MANAGE: "Manage Couriers",
    P.PAYROLL_VIEW: "View Payroll",
    P.PAYROLL_MANAGE: "Manage Payroll",
    P.SALARY_APPROVE: "Approve Salaries",
    P.ADVANCES_APPROVE: "Approve Advances",
    P.STAFF_VIEW: "View Staff",
    P.STAFF_MANAGE: "Manage Staff",
    P.STAFF_MANAGE_ROLES: "Manage Staff Roles",
    P.STAFF_INVITE: "Invite Staff",
    P.STAFF_REMOVE: "Remove Staff",
    P.ANALYTICS_VIEW: "View Analytics",
    P.REPORTS_BASIC: "Basic Reports",
    P.REPORTS_FINANCIAL: "Financial Reports",
    P.REPORTS_EXPORT: "Export Reports",
    P.SETTINGS_VIEW: "View Settings",
    P.SETTINGS_MANAGE: "Manage Settings",
    P.SHOP_SETTINGS: "Shop Settings",
    P.AI_USE: "Use AI Features",
    P.AI_APPROVE_OPERATIONS: "Approve AI Operations",
    P.TAX_VIEW: "View Tax",
    P.TAX_MANAGE: "Manage Tax",
    P.BUDGET_VIEW: "View Budget",
    P.BUDGET_MANAGE: "Manage Budget",
    P.REMINDERS_VIEW: "View Payment Reminders",
    P.REMINDERS_CREATE: "Create Payment Reminders",
    P.REMINDERS_UPDATE: "Update Payment Reminders",
    P.REMINDERS_DELETE: "Delete Payment Reminders",
}


# ── Default tables ───────────────────────────────────────────────


def _granting(*granted: PermissionKey) -> dict[PermissionKey, bool]:
    """Full table where only `granted` keys are true."""
    allowed = set(granted)
    return {key: key in allowed for key in PermissionKey}


OWNER_DEFAULT_PERMISSIONS = _granting(*PermissionKey)

MANAGER_DEFAULT_PERMISSIONS = {
    **OWNER_DEFAULT_PERMISSIONS,
    P.STAFF_MANAGE_ROLES: False,
    P.STAFF_REMOVE: False,
    P.SHOP_SETTINGS: False,
    P.AI_APPROVE_OPERATIONS: False,
}

FINANCE_DEFAULT_PERMISSIONS = _granting(
    P.INVENTORY_VIEW,
    P.SALES_VIEW,
    P.CUSTOMERS_VIEW,
    P.CUSTOMERS_CREDIT,
    P.SUPPLIERS_VIEW,
    P.SUPPLIERS_MANAGE,
    P.SUPPLIERS_PAYMENTS,
    P.PURCHASES_VIEW,
    P.PURCHASES_CREATE,
    P.PURCHASES_EDIT,
    P.EXPENSES_VIEW,
    P.EXPENSES_CREATE,
    P.EXPENSES_APPROVE,
    P.WORKSHOPS_VIEW,
    P.WORKSHOPS_PAYMENTS,
    P.DELIVERIES_VIEW,
    P.PAYROLL_VIEW,
    P.PAYROLL_MANAGE,
    P.SALARY_APPROVE,
    P.ADVANCES_APPROVE,
    P.STAFF_VIEW,
    P.ANALYTICS_VIEW,
    P.REPORTS_BASIC,
    P.REPORTS_FINANCIAL,
    P.REPORTS_EXPORT,
    P.SETTINGS_VIEW,
    P.AI_USE,
    P.TAX_VIEW,
    P.TAX_MANAGE,
    P.BUDGET_VIEW,
    P.BUDGET_MANAGE,
    P.REMINDERS_VIEW,
    P.REMINDERS_CREATE,
    P.REMINDERS_UPDATE,
    P.REMINDERS_DELETE,
)

STAFF_DEFAULT_PERMISSIONS = _granting(
    P.INVENTORY_VIEW,
    P.INVENTORY_MANAGE,
    P.SALES_VIEW,
    P.SALES_CREATE,
    P.CUSTOMERS_VIEW,
    P.CUSTOMERS_MANAGE,
    P.SUPPLIERS_VIEW,
    P.PURCHASES_VIEW,
    P.WORKSHOPS_VIEW,
    P.WORKSHOPS_ORDERS,
    P.DELIVERIES_VIEW,
    P.DELIVERIES_MANAGE,
    P.ANALYTICS_VIEW,
    P.REPORTS_BASIC,
    P.AI_USE,
    P.REMINDERS_VIEW,
)

DEFAULT_PERMISSIONS: dict[Role, dict[PermissionKey, bool]] = {
    Role.OWNER: OWNER_DEFAULT_PERMISSIONS,
    Role.MANAGER: MANAGER_DEFAULT_PERMISSIONS,
    Role.FINANCE: FINANCE_DEFAULT_PERMISSIONS,
    Role.STAFF: STAFF_DEFAULT_PERMISSIONS,
}


def get_default_permissions(role) -> dict[PermissionKey, bool]:
    """Return a copy of the default table for `role`; unknown roles get staff."""
    return dict(DEFAULT_PERMISSIONS.get(role, STAFF_DEFAULT_PERMISSIONS))
