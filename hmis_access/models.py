"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Identity:
    """The authenticated user as supplied by the session provider."""
    role: str                           # raw role string, normalised by roles.normalize_role
    is_active: bool = True
    tenant: Optional[str] = None        # hospital label, e.g. "hope"
    display_name: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class SessionState:
    """Snapshot of the session provider at one evaluation."""
    identity: Optional[Identity] = None
    loading: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None


# ── Tenant filters ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Unrestricted:
    """No tenant constraint; only produced for elevated roles."""


@dataclass(frozen=True)
class EqualsTenant:
    """Restrict records to a single hospital."""
    label: str


TenantFilter = Union[Unrestricted, EqualsTenant]


# ── Guard decisions ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Loading:
    """Session still resolving; render a neutral placeholder."""


@dataclass(frozen=True)
class Render:
    """Render the protected content."""


@dataclass(frozen=True)
class Redirect:
    target: str
    reason: str


GuardDecision = Union[Loading, Render, Redirect]


@dataclass(frozen=True)
class Notice:
    """User-visible denial notification."""
    title: str
    description: str
