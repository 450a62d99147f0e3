"""
Role taxonomy – the closed set of HMIS roles and their classifications.
"""

from enum import Enum
from typing import Dict, Union


class Role(str, Enum):

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    RECEPTION = "reception"
    LAB = "lab"
    RADIOLOGY = "radiology"
    PHARMACY = "pharmacy"
    DOCTOR = "doctor"
    NURSE = "nurse"
    ACCOUNTANT = "accountant"
    USER = "user"
    MARKETING_MANAGER = "marketing_manager"
    UNKNOWN = "unknown"


# Alternate spellings found in stored user rows.
ROLE_ALIASES: Dict[str, Role] = {
    "superadmin": Role.SUPER_ADMIN,
}

ELEVATED_ROLES = {Role.SUPER_ADMIN}

ROLE_DISPLAY_NAMES: Dict[Role, str] = {
    Role.SUPER_ADMIN: "Super Administrator",
    Role.ADMIN: "Hospital Administrator",
    Role.RECEPTION: "Reception Staff",
    Role.LAB: "Lab Technician",
    Role.RADIOLOGY: "Radiology Technician",
    Role.PHARMACY: "Pharmacy Staff",
    Role.DOCTOR: "Doctor",
    Role.NURSE: "Nurse",
    Role.ACCOUNTANT: "Accountant",
    Role.USER: "User",
    Role.MARKETING_MANAGER: "Marketing Manager",
}


def normalize_role(value: Union[Role, str, None]) -> Role:
    """Map free-form input to a Role; anything unrecognised becomes Role.UNKNOWN."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return Role.UNKNOWN
    key = value.strip().lower()
    if key in ROLE_ALIASES:
        return ROLE_ALIASES[key]
    try:
        return Role(key)
    except ValueError:
        return Role.UNKNOWN


def is_elevated(role: Union[Role, str, None]) -> bool:
    """True for roles that bypass permission checks and tenant filtering."""
    return normalize_role(role) in ELEVATED_ROLES


def is_tenant_scoped(role: Union[Role, str, None]) -> bool:
    return not is_elevated(role)


def role_display_name(role: Union[Role, str, None]) -> str:
    return ROLE_DISPLAY_NAMES.get(normalize_role(role), "Unknown")
