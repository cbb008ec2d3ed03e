"""Startup orchestration for the portal session."""

from dataclasses import dataclass
from typing import Literal, Tuple

from utils import session_manager

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


def run_startup() -> StartupResult:
    """Prepare session state and restore the stored identity once per browser session."""
    executed_steps = []

    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    manager = session_manager.get_auth_manager()
    executed_steps.append("get_auth_manager")

    # Hydration runs once; later reruns keep the in-memory state machine.
    if manager.is_loading:
        manager.hydrate()
        executed_steps.append("hydrate_session")

    if manager.is_authenticated:
        session_manager.attach_sentry_user(manager.identity)
        executed_steps.append("attach_sentry_user")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
