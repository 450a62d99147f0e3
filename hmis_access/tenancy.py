"""
Hospital (tenant) scoping – deriving row filters and applying them to SQLAlchemy queries.
"""

from typing import Optional

from sqlalchemy import Select
from sqlalchemy.sql import operators
from sqlalchemy.sql.elements import BinaryExpression, BindParameter, BooleanClauseList

from hmis_access.config import FALLBACK_TENANT, KNOWN_TENANTS, TENANT_FIELD
from hmis_access.models import EqualsTenant, TenantFilter, Unrestricted
from hmis_access.roles import is_elevated


def tenant_filter(role, tenant: Optional[str]) -> TenantFilter:
    """Return the row filter for *role*; scoped roles without a label get FALLBACK_TENANT."""
    if is_elevated(role):
        return Unrestricted()
    return EqualsTenant(tenant or FALLBACK_TENANT)


def can_access_tenant_data(role, own_tenant: Optional[str], target_tenant: Optional[str]) -> bool:
    """Check a single record's hospital against the caller's, e.g. before returning a lookup by id."""
    if is_elevated(role):
        return True
    # A caller without a hospital label matches nothing.
    return own_tenant is not None and own_tenant == target_tenant


# ── Query shaping ────────────────────────────────────────────────────

def _tenant_column(stmt: Select, field: str):
    for from_clause in stmt.get_final_froms():
        if field in from_clause.c:
            return from_clause.c[field]
    raise ValueError(f"Tenant block: query has no '{field}' column to scope on.")


def _same_column(left, column) -> bool:
    # ORM attributes compare as annotated copies of the table column.
    if left is column:
        return True
    return getattr(left, "key", None) == column.key and getattr(left, "table", None) is column.table


def _has_equality(stmt: Select, column, value: str) -> bool:
    where = stmt.whereclause
    if where is None:
        return False
    if isinstance(where, BooleanClauseList) and where.operator is operators.and_:
        criteria = where.clauses
    else:
        criteria = [where]
    for crit in criteria:
        if (
            isinstance(crit, BinaryExpression)
            and crit.operator is operators.eq
            and _same_column(crit.left, column)
            and isinstance(crit.right, BindParameter)
            and crit.right.value == value
        ):
            return True
    return False


def apply_filter(stmt: Select, role, tenant: Optional[str], field: str = TENANT_FIELD) -> Select:
    """
    Constrain *stmt* to the caller's hospital.

    Elevated roles get *stmt* back untouched. Otherwise one ``field = label``
    criterion is added; if the same criterion is already present the
    statement is returned as-is, so applying twice is harmless.
    """
    flt = tenant_filter(role, tenant)
    if isinstance(flt, Unrestricted):
        return stmt

    column = _tenant_column(stmt, field)
    if _has_equality(stmt, column, flt.label):
        return stmt
    return stmt.where(column == flt.label)


# ── Display helpers ──────────────────────────────────────────────────

def tenant_display_name(label: str) -> str:
    return KNOWN_TENANTS.get(label, label)


def is_known_tenant(label: Optional[str]) -> bool:
    return label in KNOWN_TENANTS
