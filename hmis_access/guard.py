"""
Access guard for protected views.

``decide`` is the pure transition function; ``AccessGuard`` wraps it and
performs the two side effects (denial notice, navigation) through injected
callables so the routing layer stays in charge of how they happen.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from hmis_access.config import ENTRY_VIEW
from hmis_access.models import GuardDecision, Loading, Notice, Redirect, Render, SessionState
from hmis_access.permissions import ModuleLike, can_access_module
from hmis_access.roles import Role, is_elevated, normalize_role
from hmis_access.routing import can_access_route


class GuardState(str, Enum):

    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    INACTIVE = "inactive"
    ROLE_DENIED = "role_denied"
    AUTHORIZED = "authorized"


NOTICES = {
    GuardState.UNAUTHENTICATED: Notice(
        "Access Denied", "Please login to access this page"),
    GuardState.INACTIVE: Notice(
        "Account Disabled", "Your account has been deactivated. Contact administrator."),
    GuardState.ROLE_DENIED: Notice(
        "Access Denied", "You do not have permission to access this page"),
}


@dataclass(frozen=True)
class GuardOutcome:
    state: GuardState
    decision: GuardDecision
    notice: Optional[Notice] = None


def _denied(state: GuardState, redirect_to: str) -> GuardOutcome:
    return GuardOutcome(state, Redirect(redirect_to, state.value), NOTICES[state])


def decide(
    session: SessionState,
    allowed_roles: Iterable = (),
    required_module: ModuleLike = None,
    redirect_to: str = ENTRY_VIEW,
    required_path: Optional[str] = None,
) -> GuardOutcome:
    """Evaluate the guard rules in priority order; the first match wins."""
    allowed_roles = tuple(allowed_roles)
    if session.loading:
        return GuardOutcome(GuardState.LOADING, Loading())

    identity = session.identity
    if identity is None:
        return _denied(GuardState.UNAUTHENTICATED, redirect_to)

    if not identity.is_active:
        return _denied(GuardState.INACTIVE, redirect_to)

    if not is_elevated(identity.role):
        role = normalize_role(identity.role)
        allowed = {normalize_role(r) for r in allowed_roles} - {Role.UNKNOWN}
        if allowed_roles and role not in allowed:
            return _denied(GuardState.ROLE_DENIED, redirect_to)
        if required_module is not None and not can_access_module(role, required_module):
            return _denied(GuardState.ROLE_DENIED, redirect_to)
        if required_path is not None and not can_access_route(role, required_path):
            return _denied(GuardState.ROLE_DENIED, redirect_to)

    return GuardOutcome(GuardState.AUTHORIZED, Render())


def print_notice(notice: Notice) -> None:
    print(f"[access] {notice.title}: {notice.description}", file=sys.stderr)


class AccessGuard:
    """Runs ``decide`` and carries out its notice and redirect."""

    def __init__(
        self,
        navigate: Callable[[str], None],
        notify: Callable[[Notice], None] = print_notice,
    ):
        self._navigate = navigate
        self._notify = notify

    def evaluate(
        self,
        session: SessionState,
        allowed_roles: Iterable = (),
        required_module: ModuleLike = None,
        current_view: Optional[str] = None,
        redirect_to: str = ENTRY_VIEW,
        check_path: bool = False,
    ) -> GuardOutcome:
        required_path = current_view if check_path else None
        outcome = decide(session, allowed_roles, required_module, redirect_to, required_path)

        if outcome.notice is not None:
            self._notify(outcome.notice)

        decision = outcome.decision
        # Already on the target: nothing to navigate to.
        if isinstance(decision, Redirect) and decision.target != current_view:
            self._navigate(decision.target)

        return outcome
