from unittest.mock import MagicMock, patch

import pytest

from use_cases.auth_flow import AuthSessionManager
from use_cases.domain_models import StockItem, VideoRecord
from use_cases.session_models import Identity
from use_cases.session_store import InMemorySessionStore

ADMIN_PAYLOAD = {"_id": "u-admin", "username": "boss", "role": "admin", "token": "tok-admin", "email": "boss@example.com"}
STAFF_PAYLOAD = {"_id": "u-staff", "username": "staff1", "role": "staff", "token": "tok-staff", "name": "Sam Staff"}


@pytest.fixture
def admin_identity():
    return Identity.from_payload(ADMIN_PAYLOAD)


@pytest.fixture
def staff_identity():
    return Identity.from_payload(STAFF_PAYLOAD)


@pytest.fixture
def auth_client():
    return MagicMock()


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def manager(auth_client, store):
    mgr = AuthSessionManager(auth_client, store)
    mgr.hydrate()
    return mgr


def make_stock(item_id, plate, make="Ford", model="Focus"):
    return StockItem(id=str(item_id), registration_plate=plate, make=make, model=model)


def make_video(video_id, title, uploader_name=None):
    return VideoRecord(id=video_id, title=title, uploader_name=uploader_name)


class FakeSessionState(dict):
    """Attribute-style dict standing in for ``st.session_state`` outside a script run."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __setattr__(self, name, value):
        self[name] = value

    def __delattr__(self, name):
        del self[name]


@pytest.fixture
def session_state():
    import streamlit as st

    state = FakeSessionState()
    with patch.object(st, "session_state", state):
        yield state
