"""
Flask glue for the access guard: per-request session state, landing redirect
and the ``protected`` view decorator.
"""

import sys
from functools import wraps
from typing import Callable, Optional

from flask import flash, g, jsonify, redirect, request, session

from hmis_access.config import ENTRY_VIEW
from hmis_access.guard import AccessGuard
from hmis_access.models import Identity, Loading, Notice, Redirect, SessionState
from hmis_access.routing import LandingRedirector

IdentityLoader = Callable[[str], Optional[Identity]]

SESSION_USER_KEY = "user_id"
SESSION_LANDING_KEY = "landing_key"


def current_session_state() -> SessionState:
    return g.get("access_session") or SessionState()


def init_access(app, identity_loader: IdentityLoader) -> None:
    """Resolve the caller's identity before every request and apply the landing redirect."""

    @app.before_request
    def load_session_state():
        user_id = session.get(SESSION_USER_KEY)
        identity = None
        if user_id:
            try:
                identity = identity_loader(user_id)
            except Exception as e:
                print(f"[WARN] Could not load identity for user {user_id}: {e}", file=sys.stderr)
        g.access_session = SessionState(identity=identity)

        stored = session.get(SESSION_LANDING_KEY)
        previous = tuple(stored) if stored else None
        redirector = LandingRedirector(previous)
        target = redirector.observe(g.access_session, request.path)
        if redirector.last_key != previous:
            session[SESSION_LANDING_KEY] = list(redirector.last_key)

        if target is not None:
            print(f"[access] Landing {identity.role} on {target.value}", file=sys.stderr)
            return redirect(target.value)
        return None


def flash_notice(notice: Notice) -> None:
    flash(f"{notice.title}: {notice.description}", "error")


def protected(allowed_roles=(), module=None, redirect_to: str = ENTRY_VIEW, check_path: bool = False):
    """Decorator that runs the access guard in front of a Flask view.

    With *check_path* the request path must also be on the role's route list.
    """
    def wrapper(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            navigations = []
            guard = AccessGuard(navigate=navigations.append, notify=flash_notice)
            outcome = guard.evaluate(
                current_session_state(),
                allowed_roles,
                required_module=module,
                current_view=request.path,
                redirect_to=redirect_to,
                check_path=check_path,
            )

            if navigations:
                return redirect(navigations[-1])
            if isinstance(outcome.decision, Loading):
                return jsonify({"status": "loading"}), 202
            if isinstance(outcome.decision, Redirect):
                # Denied while already on the redirect target.
                return jsonify({"error": outcome.notice.description}), 403

            return f(*args, **kwargs)

        return decorated

    return wrapper
