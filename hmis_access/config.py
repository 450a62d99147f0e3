"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Tenancy ──────────────────────────────────────────────────────────
# Column that partitions every hospital-owned table.
TENANT_FIELD = "hospital_type"

# Used for tenant-scoped identities that carry no hospital label.
FALLBACK_TENANT = os.getenv("HMIS_FALLBACK_TENANT", "hope")

KNOWN_TENANTS = {
    "hope": "Hope Hospital",
    "ayushman": "Ayushman Hospital",
}

# ── Routing ──────────────────────────────────────────────────────────
ENTRY_VIEW = "/"
NEUTRAL_VIEWS = {"/", "/dashboard"}

# ── Persistence ──────────────────────────────────────────────────────
USER_TABLE = "User"

# ── Web ──────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "dev-secret-key-change-in-production")


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
