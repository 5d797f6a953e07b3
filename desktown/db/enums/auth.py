"""Auth and presence enums."""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    - MEMBER: default for self-registered staff
    - MANAGER: runs offices, jobs and automations
    - ADMIN / SUPER_ADMIN: platform administration
    - OFFICE_RENTER: tenant renting a virtual office
    - VISITOR: storefront visitor account
    """
    MEMBER = "member"
    MANAGER = "manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    OFFICE_RENTER = "office_renter"
    VISITOR = "visitor"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class PresenceStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    AWAY = "away"
    BUSY = "busy"


ADMIN_ROLES = [Role.ADMIN, Role.SUPER_ADMIN]
MANAGER_ROLES = [Role.MANAGER, Role.ADMIN, Role.SUPER_ADMIN]
