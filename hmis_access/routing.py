"""
Role-based navigation – default landing views, sidebar items and the post-login redirect.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from hmis_access.config import NEUTRAL_VIEWS
from hmis_access.models import Identity, SessionState
from hmis_access.permissions import Module, can_access_module
from hmis_access.roles import Role, is_elevated, normalize_role


class RouteId(str, Enum):

    ROOT = "/"
    DASHBOARD = "/dashboard"
    LAB = "/lab"
    RADIOLOGY = "/radiology"
    PHARMACY = "/pharmacy"
    PATIENT_DASHBOARD = "/patient-dashboard"
    TODAYS_IPD = "/todays-ipd"
    ACCOUNTING = "/accounting"
    MARKETING = "/marketing"


ROUTE_LABELS: Dict[RouteId, str] = {
    RouteId.ROOT: "Home",
    RouteId.DASHBOARD: "Dashboard",
    RouteId.LAB: "Lab Management",
    RouteId.RADIOLOGY: "Radiology",
    RouteId.PHARMACY: "Pharmacy",
    RouteId.PATIENT_DASHBOARD: "Patient Dashboard",
    RouteId.TODAYS_IPD: "IPD Dashboard",
    RouteId.ACCOUNTING: "Accounting",
    RouteId.MARKETING: "Marketing",
}

DEFAULT_ROUTE = RouteId.DASHBOARD

ROLE_DEFAULT_ROUTES: Dict[Role, RouteId] = {
    Role.SUPER_ADMIN: RouteId.DASHBOARD,
    Role.ADMIN: RouteId.DASHBOARD,
    Role.LAB: RouteId.LAB,
    Role.RADIOLOGY: RouteId.RADIOLOGY,
    Role.PHARMACY: RouteId.PHARMACY,
    Role.DOCTOR: RouteId.PATIENT_DASHBOARD,
    Role.NURSE: RouteId.PATIENT_DASHBOARD,
    Role.RECEPTION: RouteId.TODAYS_IPD,
    Role.ACCOUNTANT: RouteId.ACCOUNTING,
    Role.MARKETING_MANAGER: RouteId.MARKETING,
    Role.USER: RouteId.DASHBOARD,
}


def default_route(role) -> RouteId:
    """Landing view for *role*; unknown input lands on the general dashboard."""
    return ROLE_DEFAULT_ROUTES.get(normalize_role(role), DEFAULT_ROUTE)


def default_route_label(role) -> str:
    return ROUTE_LABELS[default_route(role)]


# ── Path access ──────────────────────────────────────────────────────

ANY_PATH = "*"

# "/prefix/*" matches the prefix itself and anything below it.
# Each role's own landing view is listed so path gating never locks it out.
ROUTE_ACCESS: Dict[Role, Tuple[str, ...]] = {
    Role.ADMIN: (ANY_PATH,),
    Role.RECEPTION: (
        "/", "/dashboard", "/todays-ipd", "/patients", "/opd", "/ipd",
        "/billing", "/appointments", "/patient/*",
    ),
    Role.LAB: ("/", "/dashboard", "/lab/*", "/patients"),
    Role.RADIOLOGY: ("/", "/dashboard", "/radiology/*", "/patients"),
    Role.PHARMACY: ("/", "/dashboard", "/pharmacy/*", "/patients"),
    Role.DOCTOR: (
        "/", "/dashboard", "/patient-dashboard", "/patients/*", "/opd", "/ipd",
        "/lab", "/radiology", "/ot",
    ),
    Role.NURSE: (
        "/", "/dashboard", "/patient-dashboard", "/patients/*", "/ipd", "/nursing-notes",
    ),
    Role.ACCOUNTANT: ("/", "/dashboard", "/billing", "/accounting", "/ledger", "/reports"),
    Role.USER: ("/", "/dashboard"),
    Role.MARKETING_MANAGER: ("/", "/dashboard", "/marketing/*"),
}


def _normalize_path(path: str) -> str:
    path = (path or "").strip()
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def _path_matches(pattern: str, path: str) -> bool:
    if pattern == ANY_PATH:
        return True
    if pattern.endswith("/*"):
        base = pattern[:-2]
        return path == base or path.startswith(base + "/")
    return path == pattern


def can_access_route(role, path: str) -> bool:
    """True if *role* may open *path*; elevated roles may open anything."""
    if is_elevated(role):
        return True
    path = _normalize_path(path)
    patterns = ROUTE_ACCESS.get(normalize_role(role), ())
    return any(_path_matches(p, path) for p in patterns)


# ── Sidebar ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class NavItem:
    name: str
    path: str
    module: Module


NAV_ITEMS: Tuple[NavItem, ...] = (
    NavItem("Dashboard", "/", Module.DASHBOARD),
    NavItem("Patients", "/patients", Module.PATIENTS),
    NavItem("OPD", "/opd", Module.OPD),
    NavItem("IPD", "/ipd", Module.IPD),
    NavItem("Laboratory", "/lab", Module.LAB),
    NavItem("Radiology", "/radiology", Module.RADIOLOGY),
    NavItem("Pharmacy", "/pharmacy", Module.PHARMACY),
    NavItem("Billing", "/billing", Module.BILLING),
    NavItem("Accounting", "/accounting", Module.ACCOUNTING),
    NavItem("OT", "/ot", Module.OT),
    NavItem("Reports", "/reports", Module.REPORTS),
    NavItem("Settings", "/settings", Module.SETTINGS),
)


def navigation_items(role) -> List[NavItem]:
    """Sidebar entries whose module the role can view."""
    return [item for item in NAV_ITEMS if can_access_module(role, item.module)]


# ── Post-login redirect ──────────────────────────────────────────────

def landing_target(identity: Optional[Identity], current_view: str) -> Optional[RouteId]:
    """Where an authenticated user sitting on a neutral view should go, if anywhere."""
    if identity is None or not identity.is_active or current_view not in NEUTRAL_VIEWS:
        return None
    target = default_route(identity.role)
    if target == current_view:
        return None
    return target


class LandingRedirector:
    """
    One-shot landing redirect.

    Only a change in (is_authenticated, current_view) is a transition; observing
    the same pair again yields nothing, so a default route that is itself a
    neutral view cannot loop.
    """

    def __init__(self, last_key: Optional[Tuple[bool, str]] = None):
        self.last_key = last_key

    def observe(self, session: SessionState, current_view: str) -> Optional[RouteId]:
        if session.loading:
            return None
        key = (session.is_authenticated, current_view)
        if key == self.last_key:
            return None
        self.last_key = key
        return landing_target(session.identity, current_view)
