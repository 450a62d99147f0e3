"""
Permission matrix – which role may perform which action on which module.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from hmis_access.roles import Role, is_elevated, normalize_role


class Module(str, Enum):

    DASHBOARD = "dashboard"
    PATIENTS = "patients"
    VISITS = "visits"
    OPD = "opd"
    IPD = "ipd"
    LAB = "lab"
    RADIOLOGY = "radiology"
    PHARMACY = "pharmacy"
    BILLING = "billing"
    ACCOUNTING = "accounting"
    OT = "ot"
    REPORTS = "reports"
    USERS = "users"
    SETTINGS = "settings"
    MASTERS = "masters"
    RECORDS = "records"


class Action(str, Enum):

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    EXPORT = "export"
    MANAGE = "manage"


ACTION_ALIASES: Dict[str, Action] = {
    "read": Action.VIEW,
    "update": Action.EDIT,
}

ModuleLike = Union[Module, str, None]
ActionLike = Union[Action, str, None]


def parse_module(value: ModuleLike) -> Optional[Module]:
    """Return the Module for *value*, or None if it is not a known module."""
    if isinstance(value, Module):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Module(value.strip().lower())
    except ValueError:
        return None


def parse_action(value: ActionLike) -> Optional[Action]:
    """Return the Action for *value* (accepting read/update), or None."""
    if isinstance(value, Action):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    if key in ACTION_ALIASES:
        return ACTION_ALIASES[key]
    try:
        return Action(key)
    except ValueError:
        return None


# ── Matrix ───────────────────────────────────────────────────────────

_V, _C, _E, _D, _X, _M = (
    Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.EXPORT, Action.MANAGE,
)

VIEW_ONLY = frozenset({_V})
CLINICAL_EDIT = frozenset({_C, _V, _E})
RECORD_KEEPING = {
    Module.MASTERS: VIEW_ONLY,
    Module.RECORDS: CLINICAL_EDIT,
}

# Elevated roles are not listed: they bypass the matrix entirely.
# Anything missing from a row is denied.
PERMISSION_MATRIX: Dict[Role, Dict[Module, FrozenSet[Action]]] = {
    Role.ADMIN: {
        Module.DASHBOARD: frozenset({_V, _X}),
        Module.PATIENTS: frozenset({_C, _V, _E, _X}),
        Module.VISITS: frozenset({_C, _V, _E, _X}),
        Module.OPD: frozenset({_C, _V, _E, _X}),
        Module.IPD: frozenset({_C, _V, _E, _X}),
        Module.LAB: frozenset({_C, _V, _E, _X}),
        Module.RADIOLOGY: frozenset({_C, _V, _E, _X}),
        Module.PHARMACY: frozenset({_C, _V, _E, _X}),
        Module.BILLING: frozenset({_C, _V, _E, _X}),
        Module.ACCOUNTING: frozenset({_V, _X}),
        Module.OT: frozenset({_C, _V, _E, _X}),
        Module.REPORTS: frozenset({_V, _X}),
        Module.USERS: frozenset({_C, _V, _E, _D, _M}),
        Module.SETTINGS: frozenset({_V, _E}),
        Module.MASTERS: frozenset({_C, _V, _E, _D}),
        Module.RECORDS: frozenset({_C, _V, _E, _D}),
    },
    Role.RECEPTION: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.PATIENTS: CLINICAL_EDIT,
        Module.VISITS: CLINICAL_EDIT,
        Module.OPD: CLINICAL_EDIT,
        Module.IPD: CLINICAL_EDIT,
        Module.LAB: VIEW_ONLY,
        Module.RADIOLOGY: VIEW_ONLY,
        Module.PHARMACY: VIEW_ONLY,
        Module.BILLING: CLINICAL_EDIT,
        Module.REPORTS: VIEW_ONLY,
        **RECORD_KEEPING,
    },
    Role.LAB: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.PATIENTS: VIEW_ONLY,
        Module.VISITS: VIEW_ONLY,
        Module.LAB: frozenset({_V, _E}),
        Module.REPORTS: VIEW_ONLY,
        **RECORD_KEEPING,
    },
    Role.RADIOLOGY: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.PATIENTS: VIEW_ONLY,
        Module.VISITS: VIEW_ONLY,
        Module.RADIOLOGY: frozenset({_V, _E}),
        Module.REPORTS: VIEW_ONLY,
        **RECORD_KEEPING,
    },
    Role.PHARMACY: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.PATIENTS: VIEW_ONLY,
        Module.VISITS: VIEW_ONLY,
        Module.PHARMACY: CLINICAL_EDIT,
        Module.BILLING: VIEW_ONLY,
        Module.REPORTS: VIEW_ONLY,
        **RECORD_KEEPING,
    },
    Role.DOCTOR: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.PATIENTS: frozenset({_V, _E}),
        Module.VISITS: frozenset({_V, _E}),
        Module.OPD: CLINICAL_EDIT,
        Module.IPD: CLINICAL_EDIT,
        Module.LAB: frozenset({_C, _V}),
        Module.RADIOLOGY: frozenset({_C, _V}),
        Module.PHARMACY: VIEW_ONLY,
        Module.BILLING: VIEW_ONLY,
        Module.OT: CLINICAL_EDIT,
        Module.REPORTS: VIEW_ONLY,
        **RECORD_KEEPING,
    },
    Role.NURSE: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.PATIENTS: frozenset({_V, _E}),
        Module.VISITS: frozenset({_V, _E}),
        Module.OPD: VIEW_ONLY,
        Module.IPD: frozenset({_V, _E}),
        Module.LAB: VIEW_ONLY,
        Module.RADIOLOGY: VIEW_ONLY,
        Module.PHARMACY: VIEW_ONLY,
        Module.OT: VIEW_ONLY,
        **RECORD_KEEPING,
    },
    Role.ACCOUNTANT: {
        Module.DASHBOARD: frozenset({_V, _X}),
        Module.PATIENTS: VIEW_ONLY,
        Module.VISITS: VIEW_ONLY,
        Module.BILLING: frozenset({_V, _X}),
        Module.ACCOUNTING: frozenset({_C, _V, _E, _X}),
        Module.REPORTS: frozenset({_V, _X}),
        **RECORD_KEEPING,
    },
    Role.USER: {
        Module.DASHBOARD: VIEW_ONLY,
        **RECORD_KEEPING,
    },
    Role.MARKETING_MANAGER: {
        Module.DASHBOARD: VIEW_ONLY,
        Module.REPORTS: VIEW_ONLY,
    },
    Role.UNKNOWN: {},
}


# ── Checks ───────────────────────────────────────────────────────────

def has_permission(role, module: ModuleLike, action: ActionLike) -> bool:
    """
    Return True if *role* may perform *action* on *module*.

    Elevated roles are allowed before the matrix is consulted. Unknown roles,
    modules and actions are denied; this never raises.
    """
    if is_elevated(role):
        return True

    mod = parse_module(module)
    act = parse_action(action)
    if mod is None or act is None:
        return False

    row = PERMISSION_MATRIX.get(normalize_role(role), {})
    return act in row.get(mod, frozenset())


def _predicate(module: Module, action: Action):
    def check(role) -> bool:
        return has_permission(role, module, action)
    check.__name__ = f"can_{action.value}_{module.value}"
    check.__doc__ = f"True if the role may {action.value} {module.value}."
    return check


can_edit_masters = _predicate(Module.MASTERS, Action.EDIT)
can_delete_masters = _predicate(Module.MASTERS, Action.DELETE)
can_manage_users = _predicate(Module.USERS, Action.MANAGE)
can_delete_records = _predicate(Module.RECORDS, Action.DELETE)


def can_access_module(role, module: ModuleLike) -> bool:
    """A module is accessible when the role may view it."""
    return has_permission(role, module, Action.VIEW)


def accessible_modules(role) -> List[Module]:
    return [m for m in Module if can_access_module(role, m)]


def has_any_permission(role, checks: Iterable[Tuple[ModuleLike, ActionLike]]) -> bool:
    return any(has_permission(role, m, a) for m, a in checks)


def has_all_permissions(role, checks: Iterable[Tuple[ModuleLike, ActionLike]]) -> bool:
    return all(has_permission(role, m, a) for m, a in checks)


def permission_denied_message(module: ModuleLike, action: ActionLike) -> str:
    """Tooltip text for a disabled control."""
    mod = parse_module(module)
    act = parse_action(action)
    mod_name = mod.value if mod else str(module)
    act_name = act.value if act else str(action)
    return f"You don't have permission to {act_name} {mod_name}"


# ── Table access ─────────────────────────────────────────────────────

ALL_TABLES = "*"

# Backing tables each role may read from; roles not listed get none.
ROLE_TABLES: Dict[Role, FrozenSet[str]] = {
    Role.ADMIN: frozenset({ALL_TABLES}),
    Role.RECEPTION: frozenset({
        "patients", "visits", "billing", "invoices", "appointments", "final_payments",
    }),
    Role.LAB: frozenset({
        "lab_tests", "lab_results", "lab_orders", "lab_test_config", "patients",
    }),
    Role.RADIOLOGY: frozenset({
        "radiology_orders", "radiology_results", "radiology_tests", "patients",
    }),
    Role.PHARMACY: frozenset({
        "pharmacy_sales", "medications", "medicine_master", "medicine_batch_inventory",
        "pharmacy_stock", "patients",
    }),
    Role.DOCTOR: frozenset({
        "patients", "visits", "lab_orders", "radiology_orders", "prescriptions", "ot_notes",
    }),
    Role.NURSE: frozenset({
        "patients", "visits", "nursing_notes", "vitals", "medications_given",
    }),
    Role.ACCOUNTANT: frozenset({
        "billing", "invoices", "final_payments", "ledgers", "vouchers", "financial_summary",
    }),
}


def allowed_tables(role) -> FrozenSet[str]:
    if is_elevated(role):
        return frozenset({ALL_TABLES})
    return ROLE_TABLES.get(normalize_role(role), frozenset())


def can_access_data(role, table: str) -> bool:
    """True if *role* may read rows from *table*."""
    tables = allowed_tables(role)
    return ALL_TABLES in tables or table in tables
