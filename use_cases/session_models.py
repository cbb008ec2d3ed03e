"""Session DTOs shared across application layers."""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Literal, Optional, Union

Role = Literal["admin", "staff"]
ROLES = ("admin", "staff")
ChallengeStage = Literal["awaiting_code"]
FailureKind = Literal["invalid_credentials", "validation", "remote_unavailable"]

_MUTABLE_FIELDS = {"username", "role", "credential", "email", "phone", "name"}


@dataclass(frozen=True)
class Identity:
    subject_id: str
    username: str
    role: Role
    credential: str
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.username

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Identity":
        """Build an identity from a remote auth response or a stored record."""
        if not isinstance(payload, dict):
            raise ValueError("identity payload must be a mapping")
        subject_id = payload.get("subject_id") or payload.get("_id") or payload.get("id") or payload.get("userId")
        credential = payload.get("credential") or payload.get("token")
        username = payload.get("username")
        role = payload.get("role")
        if not subject_id or not credential or not username:
            raise ValueError("identity payload is missing subject, username or token")
        if role not in ROLES:
            raise ValueError(f"unknown role: {role!r}")
        return cls(
            subject_id=str(subject_id),
            username=str(username),
            role=role,
            credential=str(credential),
            email=payload.get("email"),
            phone=payload.get("phone"),
            name=payload.get("name"),
        )

    def to_record(self) -> Dict[str, Any]:
        return asdict(self)

    def merged(self, partial: Dict[str, Any]) -> "Identity":
        """Overwrite only the fields present in ``partial``."""
        unknown = set(partial) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update identity fields: {sorted(unknown)}")
        if "role" in partial and partial["role"] not in ROLES:
            raise ValueError(f"unknown role: {partial['role']!r}")
        for required in ("username", "credential"):
            if required in partial and not partial[required]:
                raise ValueError(f"{required} cannot be empty")
        return replace(self, **partial)


@dataclass(frozen=True)
class PendingChallenge:
    subject_id: str
    stage: ChallengeStage = "awaiting_code"
    attempts: int = 0


@dataclass(frozen=True)
class LoginSuccess:
    identity: Identity


@dataclass(frozen=True)
class NeedsSecondFactor:
    challenge: PendingChallenge


@dataclass(frozen=True)
class LoginFailure:
    message: str
    kind: FailureKind = "invalid_credentials"


LoginResult = Union[LoginSuccess, NeedsSecondFactor, LoginFailure]


def is_admin(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.role == "admin"


def is_staff(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.role == "staff"
