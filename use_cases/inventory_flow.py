"""Inventory loading for the stock views.

Stock and videos are read in parallel; the join only ever sees a pair of
completed snapshots. Failed reads degrade to empty collections so the view
stays usable, except an auth failure, which ends the session.
"""

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

from auth import PortalError, RemoteUnavailableError, SessionExpiredError
from use_cases.domain_models import StockSnapshot, VideoRecord

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventoryLoad:
    stock: StockSnapshot
    videos: Tuple[VideoRecord, ...]
    errors: Tuple[str, ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.errors)


def _read_stock(client, token: str) -> StockSnapshot:
    payload = client.fetch_stock(token)
    try:
        return StockSnapshot.from_api(payload)
    except (AttributeError, TypeError, ValueError) as e:
        raise RemoteUnavailableError(f"stock feed could not be parsed: {e}") from e


def _read_videos(client, token: str) -> Tuple[VideoRecord, ...]:
    payload = client.fetch_videos(token)
    try:
        return tuple(VideoRecord.from_api(raw) for raw in payload if isinstance(raw, dict))
    except (AttributeError, TypeError, ValueError) as e:
        raise RemoteUnavailableError(f"video catalog could not be parsed: {e}") from e


def load_inventory(client, manager) -> InventoryLoad:
    """Fetch both feeds for the signed-in identity and pair them up."""
    identity = manager.identity
    if identity is None:
        raise SessionExpiredError()
    token = identity.credential

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="inventory") as pool:
        stock_future = pool.submit(_read_stock, client, token)
        videos_future = pool.submit(_read_videos, client, token)

    errors = []
    expired = False

    try:
        stock = stock_future.result()
    except SessionExpiredError:
        expired = True
    except PortalError as e:
        log.error(f"❌ Stock feed unavailable, showing no stock: {e.message}")
        errors.append(f"Failed to load stock data. ({e.message})")
        stock = StockSnapshot.empty()

    try:
        videos = videos_future.result()
    except SessionExpiredError:
        expired = True
    except PortalError as e:
        log.error(f"❌ Video catalog unavailable, showing no videos: {e.message}")
        errors.append(f"Failed to load videos. ({e.message})")
        videos = ()

    if expired:
        manager.handle_session_expired()
        raise SessionExpiredError()

    return InventoryLoad(stock=stock, videos=videos, errors=tuple(errors))


class LoadTracker:
    """Liveness guard: only the most recently started load may publish its result."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._current = 0
        self._lock = threading.Lock()
        self._result: Optional[InventoryLoad] = None

    def begin(self) -> int:
        with self._lock:
            self._current = next(self._counter)
            return self._current

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._current

    def apply(self, ticket: int, load: InventoryLoad) -> bool:
        with self._lock:
            if ticket != self._current:
                log.debug(f"Dropping inventory result for superseded load #{ticket}")
                return False
            self._result = load
            return True

    def invalidate(self) -> None:
        """Tear-down: any load still in flight will be dropped."""
        with self._lock:
            self._current = next(self._counter)
            self._result = None

    @property
    def result(self) -> Optional[InventoryLoad]:
        return self._result
