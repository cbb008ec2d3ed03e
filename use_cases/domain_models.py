import json
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple

ShareAction = Literal["upload", "direct", "disclosure"]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _image_url(image: Any) -> Optional[str]:
    if isinstance(image, str):
        return image or None
    if isinstance(image, dict):
        return image.get("href") or image.get("url") or None
    return None


@dataclass(frozen=True)
class StockItem:
    """A vehicle from the external inventory feed. The plate is the join key."""
    id: str
    registration_plate: str
    make: str = ""
    model: str = ""
    derivative: str = ""
    mileage: Optional[int] = None
    media: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, payload: Dict[str, Any], position: int = 0) -> "StockItem":
        vehicle = _mapping(payload.get("vehicle"))
        plate = _text(vehicle.get("registration") or payload.get("registration"))
        metadata = _mapping(payload.get("metadata"))
        item_id = payload.get("id") or payload.get("stockId") or metadata.get("stockId") or plate or position

        # Either {"images": [...]} or the image list itself.
        images = payload.get("media") or []
        if isinstance(images, dict):
            images = images.get("images") or []
        if not isinstance(images, list):
            images = []
        media = tuple(url for url in (_image_url(img) for img in images) if url)

        mileage = vehicle.get("mileage") or vehicle.get("odometerReadingMiles")
        try:
            mileage = int(mileage) if mileage is not None else None
        except (TypeError, ValueError):
            mileage = None

        return cls(
            id=str(item_id),
            registration_plate=plate,
            make=_text(vehicle.get("make")),
            model=_text(vehicle.get("model")),
            derivative=_text(vehicle.get("derivative")),
            mileage=mileage,
            media=media,
        )


@dataclass(frozen=True)
class StockSnapshot:
    items: Tuple[StockItem, ...] = ()
    last_sync_time: Optional[str] = None
    sync_status: Optional[str] = None
    total_vehicles: int = 0
    ok: bool = True

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "StockSnapshot":
        results = payload.get("results") or []
        if not isinstance(results, list):
            results = []
        items = tuple(StockItem.from_api(raw, position=i) for i, raw in enumerate(results) if isinstance(raw, dict))
        total = payload.get("totalVehicles")
        return cls(
            items=items,
            last_sync_time=payload.get("lastSyncTime"),
            sync_status=payload.get("syncStatus"),
            total_vehicles=int(total) if isinstance(total, (int, float)) else len(items),
            ok=True,
        )

    @classmethod
    def empty(cls) -> "StockSnapshot":
        return cls(ok=False)


@dataclass(frozen=True)
class VideoRecord:
    id: str
    title: str
    uploader_id: Optional[str] = None
    uploader_name: Optional[str] = None
    created_at: Optional[str] = None
    view_count: int = 0
    video_url: Optional[str] = None
    vehicle_details: Optional[Dict[str, Any]] = field(default=None, compare=False)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "VideoRecord":
        uploader = payload.get("uploadedBy")
        uploader_id, uploader_name = None, None
        if isinstance(uploader, dict):
            uploader_id = uploader.get("_id") or uploader.get("id")
            uploader_name = uploader.get("name") or uploader.get("username")
        elif uploader is not None:
            uploader_id = str(uploader)
        uploader_id = payload.get("uploaderId") or uploader_id

        details = payload.get("vehicleDetails")
        if isinstance(details, str):
            # Uploads send the vehicle as a JSON form field.
            try:
                details = json.loads(details)
            except ValueError:
                details = None
        if not isinstance(details, dict):
            details = None

        views = payload.get("views", payload.get("viewCount", 0))
        try:
            views = int(views or 0)
        except (TypeError, ValueError):
            views = 0

        return cls(
            id=_text(payload.get("_id") or payload.get("id")),
            title=_text(payload.get("title")),
            uploader_id=str(uploader_id) if uploader_id else None,
            uploader_name=uploader_name,
            created_at=payload.get("createdAt"),
            view_count=views,
            video_url=payload.get("videoUrl"),
            vehicle_details=details,
        )


@dataclass(frozen=True)
class StockRow:
    """A stock item with its matched videos, in video snapshot order."""
    item: StockItem
    videos: Tuple[VideoRecord, ...] = ()

    @property
    def video_count(self) -> int:
        return len(self.videos)

    @property
    def has_video(self) -> bool:
        return bool(self.videos)

    @property
    def status(self) -> str:
        if not self.videos:
            return "No Video"
        return f"{len(self.videos)} Video{'s' if len(self.videos) > 1 else ''}"

    @property
    def action(self) -> ShareAction:
        if not self.videos:
            return "upload"
        if len(self.videos) == 1:
            return "direct"
        return "disclosure"
