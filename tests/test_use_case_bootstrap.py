from unittest.mock import MagicMock, patch

from use_cases import bootstrap
from use_cases.auth_flow import AuthSessionManager
from use_cases.session_store import InMemorySessionStore


def _manager(record=None):
    return AuthSessionManager(MagicMock(), InMemorySessionStore(record))


@patch("use_cases.bootstrap.session_manager.attach_sentry_user")
def test_run_startup_hydrates_once(mock_attach, session_state, staff_identity) -> None:
    manager = _manager(staff_identity.to_record())
    session_state.auth_manager = manager

    result = bootstrap.run_startup()

    assert result.status == "CONTINUE"
    assert result.planned_steps == ("init_session_state", "get_auth_manager", "hydrate_session", "attach_sentry_user")
    assert manager.is_authenticated
    mock_attach.assert_called_once_with(staff_identity)

    again = bootstrap.run_startup()
    assert "hydrate_session" not in again.planned_steps


@patch("use_cases.bootstrap.session_manager.attach_sentry_user")
def test_run_startup_without_stored_identity(mock_attach, session_state) -> None:
    session_state.auth_manager = _manager()

    result = bootstrap.run_startup()

    assert result.planned_steps == ("init_session_state", "get_auth_manager", "hydrate_session")
    mock_attach.assert_not_called()


def test_run_startup_initialises_state_before_manager(session_state) -> None:
    order = []
    manager = _manager()

    def fake_get_manager():
        order.append("get_auth_manager")
        return manager

    with patch(
        "use_cases.bootstrap.session_manager.init_session_state",
        side_effect=lambda: order.append("init_session_state"),
    ), patch("use_cases.bootstrap.session_manager.get_auth_manager", side_effect=fake_get_manager):
        bootstrap.run_startup()

    assert order == ["init_session_state", "get_auth_manager"]
