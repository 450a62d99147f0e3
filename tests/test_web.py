"""
Tests for the Flask integration – guarded views, landing redirect and the capability summary.
"""

import pytest

from hmis_access.config import FALLBACK_TENANT
from hmis_access.models import Identity
from hmis_access.web.app import create_app

USERS = {
    "root": Identity(role="super_admin", user_id="root", display_name="Root"),
    "admin": Identity(role="admin", tenant="ayushman", user_id="admin"),
    "lab": Identity(role="lab", tenant="hope", user_id="lab"),
    "doc": Identity(role="Doctor", user_id="doc"),
    "nurse": Identity(role="nurse", tenant="hope", user_id="nurse"),
    "gone": Identity(role="reception", is_active=False, tenant="hope", user_id="gone"),
}


# ── Helpers ──────────────────────────────────────────────────────────

@pytest.fixture
def client():
    app = create_app(identity_loader=USERS.get)
    app.config["TESTING"] = True
    return app.test_client()


def login(client, user_id):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def location(response):
    return response.headers["Location"].replace("http://localhost", "")


# ── Tests: guarded views ─────────────────────────────────────────────

def test_anonymous_is_sent_to_entry_view(client):
    resp = client.get("/lab")
    assert resp.status_code == 302
    assert location(resp) == "/"

    body = client.get("/").get_json()
    assert body["authenticated"] is False
    assert "Access Denied: Please login to access this page" in body["messages"]


def test_inactive_user_is_sent_to_entry_view(client):
    login(client, "gone")
    resp = client.get("/todays-ipd")
    assert resp.status_code == 302
    assert location(resp) == "/"

    # No landing redirect for a disabled account.
    body = client.get("/").get_json()
    assert any("deactivated" in m for m in body["messages"])


def test_module_gate_denies_other_departments(client):
    login(client, "lab")
    assert client.get("/lab").status_code == 200
    resp = client.get("/pharmacy")
    assert resp.status_code == 302
    assert location(resp) == "/"


def test_path_gate_on_landing_views(client):
    login(client, "nurse")
    assert client.get("/patient-dashboard").status_code == 200
    # Nurses can view the lab module but /lab is not on their route list.
    resp = client.get("/lab")
    assert resp.status_code == 302
    assert location(resp) == "/"
    assert client.get("/todays-ipd").status_code == 302


def test_role_gate_on_marketing(client):
    login(client, "admin")
    assert client.get("/marketing").status_code == 302
    login(client, "root")
    assert client.get("/marketing").status_code == 200


# ── Tests: landing redirect ──────────────────────────────────────────

def test_landing_redirect_from_root(client):
    login(client, "doc")
    resp = client.get("/")
    assert resp.status_code == 302
    assert location(resp) == "/patient-dashboard"


def test_landing_redirect_does_not_repeat(client):
    login(client, "lab")
    assert client.get("/").status_code == 302
    assert client.get("/").status_code == 200


def test_admin_stays_on_dashboard(client):
    login(client, "admin")
    resp = client.get("/dashboard")
    assert resp.status_code == 200
    assert resp.get_json() == {"view": "/dashboard", "label": "Dashboard"}


# ── Tests: /api/access ───────────────────────────────────────────────

def test_access_summary_for_scoped_user(client):
    login(client, "doc")
    body = client.get("/api/access").get_json()
    assert body["user"]["role"] == "doctor"
    assert body["tenant_filter"] == {"hospital_type": FALLBACK_TENANT}
    assert body["can"] == {
        "edit_masters": False,
        "delete_masters": False,
        "manage_users": False,
        "delete_records": False,
    }
    assert body["permissions"]["opd"] == ["view", "create", "edit"]
    assert body["default_route"] == {"path": "/patient-dashboard", "label": "Patient Dashboard"}
    assert "prescriptions" in body["tables"]
    assert "invoices" not in body["tables"]


def test_access_summary_for_super_admin(client):
    login(client, "root")
    body = client.get("/api/access").get_json()
    assert body["tenant_filter"] is None
    assert body["user"]["tenant_name"] == "All Hospitals"
    assert all(body["can"].values())
    assert len(body["modules"]) == 16
    assert body["tables"] == ["*"]


def test_access_summary_requires_login(client):
    resp = client.get("/api/access")
    assert resp.status_code == 302


def test_unknown_endpoint(client):
    resp = client.get("/nowhere")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Endpoint not found"


def test_identity_load_failure_is_treated_as_anonymous(capsys):
    def broken_loader(user_id):
        raise RuntimeError("connection reset")

    app = create_app(identity_loader=broken_loader)
    app.config["TESTING"] = True
    client = app.test_client()
    login(client, "lab")

    resp = client.get("/lab")
    assert resp.status_code == 302
    assert location(resp) == "/"
    err = capsys.readouterr().err
    assert "[WARN] Could not load identity for user lab: connection reset" in err
    assert client.get("/").get_json()["authenticated"] is False
