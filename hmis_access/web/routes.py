"""
Flask route handlers: the public entry view, role landing views and the
capability summary used by the front-end to gate its controls.
"""

from flask import g, get_flashed_messages, jsonify

from hmis_access.config import TENANT_FIELD
from hmis_access.models import Unrestricted
from hmis_access.permissions import (
    Action,
    Module,
    accessible_modules,
    allowed_tables,
    can_delete_masters,
    can_delete_records,
    can_edit_masters,
    can_manage_users,
    has_permission,
)
from hmis_access.roles import Role, normalize_role, role_display_name
from hmis_access.routing import (
    ROUTE_LABELS,
    RouteId,
    default_route,
    default_route_label,
    navigation_items,
)
from hmis_access.tenancy import tenant_display_name, tenant_filter
from hmis_access.web.auth import current_session_state, protected

# Landing views and what guards them: (allowed roles, required module).
LANDING_VIEWS = {
    RouteId.DASHBOARD: ((), Module.DASHBOARD),
    RouteId.LAB: ((), Module.LAB),
    RouteId.RADIOLOGY: ((), Module.RADIOLOGY),
    RouteId.PHARMACY: ((), Module.PHARMACY),
    RouteId.PATIENT_DASHBOARD: ((), Module.PATIENTS),
    RouteId.TODAYS_IPD: ((), Module.IPD),
    RouteId.ACCOUNTING: ((), Module.ACCOUNTING),
    RouteId.MARKETING: ((Role.MARKETING_MANAGER,), None),
}


def _landing_view(route: RouteId):
    def view():
        return jsonify({"view": route.value, "label": ROUTE_LABELS[route]})
    view.__name__ = f"landing_{route.name.lower()}"
    return view


def register_routes(app):
    """Register all routes on the Flask *app*."""

    # ── Entry view ───────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        state = current_session_state()
        return jsonify({
            "service": "HMIS Access",
            "authenticated": state.is_authenticated,
            "messages": get_flashed_messages(),
        })

    # ── Landing views ────────────────────────────────────────────────

    for route, (roles, module) in LANDING_VIEWS.items():
        view = protected(allowed_roles=roles, module=module, check_path=True)(_landing_view(route))
        app.add_url_rule(route.value, endpoint=view.__name__, view_func=view, methods=["GET"])

    # ── Capabilities ─────────────────────────────────────────────────

    @app.route("/api/access", methods=["GET"])
    @protected()
    def access_summary():
        identity = g.access_session.identity
        role = normalize_role(identity.role)
        flt = tenant_filter(role, identity.tenant)

        if isinstance(flt, Unrestricted):
            scope = None
            tenant_name = "All Hospitals"
        else:
            scope = {TENANT_FIELD: flt.label}
            tenant_name = tenant_display_name(flt.label)

        return jsonify({
            "success": True,
            "user": {
                "id": identity.user_id,
                "display_name": identity.display_name,
                "role": role.value,
                "role_name": role_display_name(role),
                "tenant": identity.tenant,
                "tenant_name": tenant_name,
            },
            "tenant_filter": scope,
            "modules": [m.value for m in accessible_modules(role)],
            "tables": sorted(allowed_tables(role)),
            "permissions": {
                m.value: [a.value for a in Action if has_permission(role, m, a)]
                for m in Module
            },
            "can": {
                "edit_masters": can_edit_masters(role),
                "delete_masters": can_delete_masters(role),
                "manage_users": can_manage_users(role),
                "delete_records": can_delete_records(role),
            },
            "navigation": [
                {"name": item.name, "path": item.path} for item in navigation_items(role)
            ],
            "default_route": {
                "path": default_route(role).value,
                "label": default_route_label(role),
            },
        }), 200

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405
