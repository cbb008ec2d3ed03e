from unittest.mock import MagicMock, patch

import pytest

import auth
from use_cases.domain_models import StockSnapshot
from use_cases.inventory_flow import InventoryLoad, LoadTracker, load_inventory
from conftest import STAFF_PAYLOAD

STOCK_PAYLOAD = {
    "results": [
        {"vehicle": {"registration": "AB12 CDE", "make": "Ford", "model": "Focus", "mileage": "42000"},
         "metadata": {"stockId": "s-1"}},
        {"vehicle": {"registration": "XY99ZZZ", "make": "BMW", "model": "3 Series"}},
    ],
    "lastSyncTime": "2024-05-01T09:30:00Z",
    "syncStatus": "success",
    "totalVehicles": 2,
}
VIDEOS_PAYLOAD = [
    {"_id": "v1", "title": "Ford Focus - AB12CDE", "uploadedBy": {"_id": "u1", "name": "Ulla"}, "views": 3},
    "not-a-record",
]


@pytest.fixture
def signed_in(manager, auth_client):
    auth_client.login.return_value = STAFF_PAYLOAD
    manager.login("staff1", "secret")
    return manager


@pytest.fixture
def inventory_client():
    client = MagicMock()
    client.fetch_stock.return_value = STOCK_PAYLOAD
    client.fetch_videos.return_value = VIDEOS_PAYLOAD
    return client


def test_load_inventory_reads_both_feeds_with_bearer(signed_in, inventory_client):
    load = load_inventory(inventory_client, signed_in)

    inventory_client.fetch_stock.assert_called_once_with("tok-staff")
    inventory_client.fetch_videos.assert_called_once_with("tok-staff")
    assert [item.id for item in load.stock.items] == ["s-1", "XY99ZZZ"]
    assert load.stock.items[0].mileage == 42000
    assert [v.id for v in load.videos] == ["v1"]
    assert load.videos[0].uploader_name == "Ulla"
    assert not load.degraded


def test_failed_stock_read_degrades_to_empty(signed_in, inventory_client):
    inventory_client.fetch_stock.side_effect = auth.RemoteUnavailableError("HTTP 502")
    load = load_inventory(inventory_client, signed_in)

    assert load.stock.items == ()
    assert load.stock.ok is False
    assert [v.id for v in load.videos] == ["v1"]
    assert load.errors == ("Failed to load stock data. (HTTP 502)",)
    assert signed_in.is_authenticated


def test_stock_with_list_shaped_media_loads(signed_in, inventory_client):
    inventory_client.fetch_stock.return_value = {"results": [
        {"vehicle": {"registration": "AB12CDE"}, "media": []},
        {"vehicle": {"registration": "XY99ZZZ"}, "media": ["http://img/1.jpg", {"href": "http://img/2.jpg"}]},
    ]}
    load = load_inventory(inventory_client, signed_in)

    assert not load.degraded
    assert load.stock.items[0].media == ()
    assert load.stock.items[1].media == ("http://img/1.jpg", "http://img/2.jpg")


def test_unparseable_stock_payload_degrades_to_empty(signed_in, inventory_client):
    inventory_client.fetch_stock.return_value = {"results": [{"vehicle": {"registration": "AB12CDE", "make": "Ford"}}]}
    with patch("use_cases.inventory_flow.StockSnapshot.from_api", side_effect=AttributeError("boom")):
        load = load_inventory(inventory_client, signed_in)

    assert load.stock.ok is False
    assert load.stock.items == ()
    assert load.errors[0].startswith("Failed to load stock data.")
    assert [v.id for v in load.videos] == ["v1"]
    assert signed_in.is_authenticated


def test_failed_video_read_degrades_to_empty(signed_in, inventory_client):
    inventory_client.fetch_videos.side_effect = auth.RemoteUnavailableError("timeout")
    load = load_inventory(inventory_client, signed_in)

    assert load.videos == ()
    assert len(load.stock.items) == 2
    assert load.degraded


def test_rejected_credential_ends_session(signed_in, inventory_client, store):
    inventory_client.fetch_videos.side_effect = auth.SessionExpiredError()

    with pytest.raises(auth.SessionExpiredError):
        load_inventory(inventory_client, signed_in)
    assert signed_in.state == "unauthenticated"
    assert store.load() is None


def test_load_without_identity_is_refused(manager, inventory_client):
    with pytest.raises(auth.SessionExpiredError):
        load_inventory(inventory_client, manager)
    inventory_client.fetch_stock.assert_not_called()


def _load(tag):
    return InventoryLoad(stock=StockSnapshot(sync_status=tag), videos=())


def test_tracker_applies_current_load():
    tracker = LoadTracker()
    ticket = tracker.begin()
    assert tracker.is_current(ticket)
    assert tracker.apply(ticket, _load("a"))
    assert tracker.result.stock.sync_status == "a"


def test_tracker_drops_superseded_load():
    tracker = LoadTracker()
    old = tracker.begin()
    new = tracker.begin()
    assert tracker.apply(new, _load("new"))
    assert not tracker.apply(old, _load("old"))
    assert tracker.result.stock.sync_status == "new"


def test_tracker_invalidate_drops_in_flight_load():
    tracker = LoadTracker()
    ticket = tracker.begin()
    tracker.apply(ticket, _load("a"))
    in_flight = tracker.begin()
    tracker.invalidate()
    assert tracker.result is None
    assert not tracker.apply(in_flight, _load("late"))
    assert tracker.result is None
