"""Application layer contracts for orchestrating high-level flows."""

from .auth_flow import AuthFlowResult, AuthFlowStatus, AuthSessionManager, ensure_authenticated_session
from .bootstrap import StartupResult, StartupStatus, run_startup
from .inventory_flow import InventoryLoad, LoadTracker, load_inventory
from .rbac_policy import GuardDecision, enforce, home_for
from .reconciliation import build_rows, build_share_link, normalize_plate, reconcile, reconcile_view
from .session_models import Identity, LoginFailure, LoginSuccess, NeedsSecondFactor, PendingChallenge, Role, is_admin
from .session_store import InMemorySessionStore, SessionStore

__all__ = [
    "AuthFlowResult",
    "AuthFlowStatus",
    "AuthSessionManager",
    "GuardDecision",
    "Identity",
    "InMemorySessionStore",
    "InventoryLoad",
    "LoadTracker",
    "LoginFailure",
    "LoginSuccess",
    "NeedsSecondFactor",
    "PendingChallenge",
    "Role",
    "SessionStore",
    "StartupResult",
    "StartupStatus",
    "build_rows",
    "build_share_link",
    "enforce",
    "ensure_authenticated_session",
    "home_for",
    "is_admin",
    "load_inventory",
    "normalize_plate",
    "reconcile",
    "reconcile_view",
    "run_startup",
]
