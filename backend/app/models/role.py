"""Roles and capabilities.

Roles are stored on ``users.role``; capabilities are the named claims that
routes check through ``PermissionPolicy``. A user's ``permissions`` JSON
column may grant extra capabilities on top of the role defaults.
"""

import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"
    EMPLOYEE = "employee"


class Capability(str, enum.Enum):
    MANAGE_USERS = "manage_users"
    MANAGE_EMPLOYEES = "manage_employees"
    MANAGE_INVENTORY = "manage_inventory"
    DELETE_INVENTORY = "delete_inventory"
    MANAGE_LOCATIONS = "manage_locations"
    MANAGE_CUSTOMERS = "manage_customers"
    DELETE_CUSTOMERS = "delete_customers"
    MANAGE_SALES = "manage_sales"
    PROCESS_PAYMENTS = "process_payments"
    PROCESS_REFUNDS = "process_refunds"
    VIEW_REPORTS = "view_reports"
    VIEW_FINANCIAL_REPORTS = "view_financial_reports"
    MANAGE_SETTINGS = "manage_settings"
    SEND_NOTIFICATIONS = "send_notifications"
    MANAGE_PARTNERS = "manage_partners"
