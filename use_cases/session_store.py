"""Durable identity storage contract.

Only ``AuthSessionManager`` writes through this interface. ``load`` returns the
raw record (or None); parsing and malformed-record handling belong to the
manager so every backend behaves the same.
"""

import copy
from typing import Any, Dict, Optional, Protocol


class SessionStore(Protocol):
    def load(self) -> Optional[Dict[str, Any]]:
        ...

    def save(self, record: Dict[str, Any]) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemorySessionStore:
    def __init__(self, record: Optional[Dict[str, Any]] = None):
        self._record = copy.deepcopy(record)

    def load(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._record)

    def save(self, record: Dict[str, Any]) -> None:
        self._record = copy.deepcopy(record)

    def clear(self) -> None:
        self._record = None
