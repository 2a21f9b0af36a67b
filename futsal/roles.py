from enum import StrEnum


class AdminRoleName(StrEnum):
    SUPER_ADMIN = "Super Admin"  # everything, including roles and admin accounts
    ADMINISTRATOR = "Administrator"  # venues, fields and prices
    ADMIN = "Admin"  # day-to-day: bookings and payment verification


ROLE_DESCRIPTIONS: dict[str, str] = {
    AdminRoleName.SUPER_ADMIN: "Manage roles, admin accounts and every resource.",
    AdminRoleName.ADMINISTRATOR: "Manage venues, fields and field prices.",
    AdminRoleName.ADMIN: "Review bookings and verify payment proofs.",
}

# Role sets used by the admin routers
ALL_ADMIN_ROLES = (
    AdminRoleName.SUPER_ADMIN,
    AdminRoleName.ADMINISTRATOR,
    AdminRoleName.ADMIN,
)
CATALOG_MANAGERS = (AdminRoleName.SUPER_ADMIN, AdminRoleName.ADMINISTRATOR)
