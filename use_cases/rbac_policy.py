"""Centralized Role-Based Access Control logic."""

import logging
from dataclasses import dataclass
from typing import Literal, Optional

import sentry_sdk

from use_cases.session_models import Identity, Role

log = logging.getLogger(__name__)

GuardOutcome = Literal["PENDING", "ALLOWED", "DENIED"]

# Roles each role may act as. Admin is a superset of staff; never the reverse.
ROLE_GRANTS = {
    "admin": {"admin", "staff"},
    "staff": {"staff"},
}


@dataclass(frozen=True)
class GuardDecision:
    outcome: GuardOutcome
    redirect: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == "ALLOWED"


PENDING = GuardDecision("PENDING")
ALLOWED = GuardDecision("ALLOWED")
DENIED = GuardDecision("DENIED", redirect="login")


def enforce(required_role: Optional[Role], identity: Optional[Identity], session_loading: bool = False) -> GuardDecision:
    """
    Decide whether a view may render for the current identity.
    Pure apart from logging; evaluate on every navigation, never cache.
    """
    if session_loading:
        return PENDING
    if identity is None:
        return DENIED
    if required_role is None:
        return ALLOWED
    if required_role in ROLE_GRANTS.get(identity.role, ()):
        return ALLOWED

    log.warning(f"RBAC denied: user={identity.username} role={identity.role} required={required_role}")
    sentry_sdk.add_breadcrumb(
        category="rbac",
        message="access denied",
        level="warning",
        data={"role": identity.role, "required_role": required_role},
    )
    return DENIED


def home_for(identity: Optional[Identity]) -> str:
    """Landing view after sign-in."""
    return "admin" if identity is not None and identity.role == "admin" else "staff"
