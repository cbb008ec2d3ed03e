from use_cases.domain_models import StockItem, StockSnapshot, VideoRecord


def test_stock_item_from_api():
    item = StockItem.from_api({
        "vehicle": {"registration": "AB12 CDE", "make": "Ford", "model": "Focus", "derivative": "ST-Line",
                    "odometerReadingMiles": 1200},
        "metadata": {"stockId": "s-9"},
        "media": {"images": [{"href": "https://img/1.jpg"}, {"nope": True}, "bad"]},
    })
    assert item.id == "s-9"
    assert item.registration_plate == "AB12 CDE"
    assert item.mileage == 1200
    assert item.media == ("https://img/1.jpg",)


def test_stock_item_tolerates_non_mapping_fields():
    item = StockItem.from_api({"vehicle": ["AB12CDE"], "metadata": "x", "media": "http://img/1.jpg", "registration": "AB12CDE"})
    assert item.registration_plate == "AB12CDE"
    assert item.make == ""
    assert item.media == ()


def test_stock_snapshot_ignores_non_list_results():
    assert StockSnapshot.from_api({"results": {"a": 1}}).items == ()


def test_stock_item_from_sparse_payload():
    item = StockItem.from_api({}, position=5)
    assert item.id == "5"
    assert item.registration_plate == ""
    assert item.mileage is None


def test_stock_snapshot_from_api():
    snapshot = StockSnapshot.from_api({"results": [{"id": "a"}, "junk"], "syncStatus": "success"})
    assert [i.id for i in snapshot.items] == ["a"]
    assert snapshot.total_vehicles == 1
    assert snapshot.ok


def test_video_record_from_api():
    video = VideoRecord.from_api({
        "_id": "v1",
        "title": "Ford Focus - AB12CDE",
        "uploadedBy": {"_id": "u1", "username": "ulla"},
        "viewCount": "7",
        "vehicleDetails": '{"registration": "AB12CDE"}',
        "createdAt": "2024-05-01T09:30:00Z",
    })
    assert video.id == "v1"
    assert video.uploader_id == "u1"
    assert video.uploader_name == "ulla"
    assert video.view_count == 7
    assert video.vehicle_details == {"registration": "AB12CDE"}


def test_video_record_tolerates_bad_fields():
    video = VideoRecord.from_api({"id": "v2", "uploadedBy": "u9", "views": "many", "vehicleDetails": "{oops"})
    assert video.uploader_id == "u9"
    assert video.uploader_name is None
    assert video.view_count == 0
    assert video.vehicle_details is None
    assert video.title == ""
