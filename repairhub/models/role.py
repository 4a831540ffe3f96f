import enum


class UserRole(str, enum.Enum):
    GENERAL             = "general"
    TRUCK_OWNER         = "truck_owner"
    COMPANY             = "company"
    COMPANY_DRIVER      = "company_driver"
    UNREGISTERED_DRIVER = "unregistered_driver"
    ADMIN               = "admin"
    EMPLOYEE            = "employee"


# Roles an account can move into through the self-service role transition.
TRANSITION_TARGETS = frozenset({
    UserRole.COMPANY,
    UserRole.COMPANY_DRIVER,
    UserRole.UNREGISTERED_DRIVER,
    UserRole.TRUCK_OWNER,
})

# Roles an administrator may assign when creating an account directly.
ADMIN_ASSIGNABLE = frozenset({UserRole.GENERAL, UserRole.EMPLOYEE, UserRole.ADMIN})
