"""Authentication flow orchestration (application layer).

``AuthSessionManager`` owns the login state machine::

    unauthenticated -> credentials_submitted -> awaiting_second_factor -> authenticated
                                             \\-> authenticated

It is the only writer of the session store. The pending one-time-code
challenge lives in memory and does not survive a reload.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Literal, Optional

from auth import (
    InvalidCredentialsError,
    InvalidStateError,
    RemoteUnavailableError,
    SessionExpiredError,
    ValidationError,
    validate_email,
    validate_login_input,
    validate_new_password,
    validate_otp_code,
)
from use_cases.rbac_policy import GuardDecision, enforce
from use_cases.session_models import (
    Identity,
    LoginFailure,
    LoginResult,
    LoginSuccess,
    NeedsSecondFactor,
    PendingChallenge,
    Role,
)
from use_cases.session_store import SessionStore

log = logging.getLogger(__name__)

AuthState = Literal["unauthenticated", "credentials_submitted", "awaiting_second_factor", "authenticated"]
AuthFlowStatus = Literal["CONTINUE", "STOP"]

# Fields the profile endpoint may echo back that belong on the identity.
PROFILE_ECHO_FIELDS = ("username", "email", "phone", "name")


class AuthSessionManager:
    def __init__(self, client, store: SessionStore):
        self._client = client
        self._store = store
        self._state: AuthState = "unauthenticated"
        self._identity: Optional[Identity] = None
        self._challenge: Optional[PendingChallenge] = None
        self._loading = True

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def challenge(self) -> Optional[PendingChallenge]:
        return self._challenge

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._state == "authenticated" and self._identity is not None

    # --- STARTUP ---

    def hydrate(self) -> Optional[Identity]:
        """Restore the identity from durable storage. Token freshness is not checked."""
        try:
            record = self._store.load()
        except Exception as e:
            log.error(f"Session store could not be read, starting logged out: {e}", exc_info=True)
            record = None

        identity = None
        if record is not None:
            try:
                identity = Identity.from_payload(record)
            except ValueError as e:
                log.warning(f"Discarding malformed stored session: {e}")
                try:
                    self._store.clear()
                except Exception as clear_error:
                    log.error(f"Failed to clear malformed stored session: {clear_error}", exc_info=True)

        self._identity = identity
        self._challenge = None
        self._state = "authenticated" if identity else "unauthenticated"
        self._loading = False
        return identity

    # --- LOGIN ---

    def login(self, username: str, password: str) -> LoginResult:
        # A new attempt always supersedes any pending challenge or active session.
        if self._state == "authenticated":
            self.logout()
        self._reset_to_unauthenticated()

        try:
            username, password = validate_login_input(username, password)
        except ValidationError as e:
            return LoginFailure(e.message, kind="validation")

        self._state = "credentials_submitted"
        try:
            data = self._client.login(username, password)
        except InvalidCredentialsError as e:
            self._reset_to_unauthenticated()
            log.info(f"Login rejected for '{username}': {e.message}")
            return LoginFailure(e.message or InvalidCredentialsError.default_message)
        except RemoteUnavailableError as e:
            self._reset_to_unauthenticated()
            return LoginFailure(e.message, kind="remote_unavailable")

        if not isinstance(data, dict):
            data = {}
        if data.get("token"):
            # The login response may omit the username; the submitted one stands in.
            result = self._authenticate({**data, "username": data.get("username") or username})
            if isinstance(result, LoginFailure):
                self._reset_to_unauthenticated()
            return result

        if data.get("requireTwoFactor") and data.get("userId"):
            self._identity = None
            self._challenge = PendingChallenge(subject_id=str(data["userId"]))
            self._state = "awaiting_second_factor"
            log.info(f"Second factor required for '{username}'")
            return NeedsSecondFactor(self._challenge)

        self._reset_to_unauthenticated()
        log.warning(f"Login response for '{username}' carried neither a token nor a 2FA challenge")
        return LoginFailure(InvalidCredentialsError.default_message)

    def verify_second_factor(self, code: str) -> LoginResult:
        if self._state != "awaiting_second_factor" or self._challenge is None:
            raise InvalidStateError("No login is waiting for a verification code.")
        try:
            code = validate_otp_code(code)
        except ValidationError as e:
            return LoginFailure(e.message, kind="validation")

        challenge = replace(self._challenge, attempts=self._challenge.attempts + 1)
        self._challenge = challenge
        try:
            data = self._client.verify_two_factor(challenge.subject_id, code)
        except InvalidCredentialsError as e:
            return LoginFailure(e.message)
        except RemoteUnavailableError as e:
            return LoginFailure(e.message, kind="remote_unavailable")

        if self._challenge is not challenge:
            log.info("Discarding verification response for a superseded login attempt")
            return LoginFailure("This login attempt was replaced. Please sign in again.")

        return self._authenticate(data if isinstance(data, dict) else {})

    def restart_login(self) -> None:
        """Abandon the pending challenge and go back to the credentials step."""
        if self._state != "authenticated":
            self._reset_to_unauthenticated()

    def _authenticate(self, data: Dict[str, Any]) -> LoginResult:
        try:
            identity = Identity.from_payload(data)
        except ValueError as e:
            log.error(f"Auth response could not be parsed into an identity: {e}")
            return LoginFailure(InvalidCredentialsError.default_message)
        self._store.save(identity.to_record())
        self._identity = identity
        self._challenge = None
        self._state = "authenticated"
        log.info(f"Login success: {identity.username} ({identity.role})")
        return LoginSuccess(identity)

    def _reset_to_unauthenticated(self) -> None:
        self._identity = None
        self._challenge = None
        self._state = "unauthenticated"

    # --- SESSION ---

    def logout(self) -> None:
        try:
            self._store.clear()
        except Exception as e:
            log.error(f"Failed to clear stored session on logout: {e}", exc_info=True)
        if self._identity is not None:
            log.info(f"Logout: {self._identity.username}")
        self._reset_to_unauthenticated()
        self._loading = False

    def handle_session_expired(self) -> None:
        log.warning("Bearer credential rejected by the API, forcing logout")
        self.logout()

    def auth_header(self) -> Dict[str, str]:
        if not self.is_authenticated:
            raise InvalidStateError("Not signed in.")
        return {"Authorization": f"Bearer {self._identity.credential}"}

    def update_identity(self, partial: Dict[str, Any]) -> Identity:
        """Merge already-confirmed changes into the stored identity."""
        if not self.is_authenticated:
            raise InvalidStateError("Not signed in.")
        updated = self._identity.merged(partial)
        self._store.save(updated.to_record())
        self._identity = updated
        return updated

    # --- ACCOUNT MAINTENANCE ---

    def update_profile(
        self,
        current_password: str,
        username: Optional[str] = None,
        new_password: Optional[str] = None,
        confirm_password: Optional[str] = None,
    ) -> Identity:
        if not self.is_authenticated:
            raise InvalidStateError("Not signed in.")
        if not current_password:
            raise ValidationError("Current password is required")
        username = (username or "").strip() or None
        if new_password:
            validate_new_password(new_password, confirm_password)

        try:
            data = self._client.update_profile(
                self._identity.credential,
                current_password,
                username=username,
                new_password=new_password or None,
            )
        except SessionExpiredError:
            self.handle_session_expired()
            raise

        echoed = {k: data[k] for k in PROFILE_ECHO_FIELDS if isinstance(data, dict) and data.get(k)}
        if username and "username" not in echoed:
            echoed["username"] = username
        return self.update_identity(echoed)

    def request_password_reset(self, email: str) -> str:
        email = validate_email(email)
        data = self._client.forgot_password(email)
        log.info("Password reset link requested")
        return (data or {}).get("message") or "Email sent! Please check your inbox for the reset link."

    def reset_password(self, reset_token: str, password: str, confirm_password: str) -> str:
        if not (reset_token or "").strip():
            raise ValidationError("Reset link is missing its token.")
        validate_new_password(password, confirm_password)
        data = self._client.reset_password(reset_token.strip(), password)
        return (data or {}).get("message") or "Password reset successful! You can now login."

    # --- GUARD ---

    def guard(self, required_role: Optional[Role] = None) -> GuardDecision:
        return enforce(required_role, self._identity, self._loading)


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    reason: str
    user_id: Optional[str] = None


def ensure_authenticated_session(manager: AuthSessionManager, required_role: Optional[Role] = None) -> AuthFlowResult:
    """Run the access guard for one view render and return a control-flow status."""
    if manager.is_loading:
        manager.hydrate()

    decision = manager.guard(required_role)
    if decision.outcome == "PENDING":
        return AuthFlowResult(status="STOP", reason="session_loading")
    if decision.outcome == "DENIED":
        reason = "auth_required" if manager.identity is None else "insufficient_role"
        return AuthFlowResult(status="STOP", reason=reason)
    return AuthFlowResult(status="CONTINUE", reason="authenticated", user_id=manager.identity.subject_id)
