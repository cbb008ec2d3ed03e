"""Stock-to-video reconciliation.

A video belongs to a stock item when the item's normalized plate occurs as a
substring of the video's normalized title. There is no foreign key between
the two feeds, so this text heuristic is the join. Everything here is a pure
function of the snapshots passed in; nothing is cached or patched in place.
"""

import math
import re
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple
from urllib.parse import quote

from use_cases.domain_models import StockItem, StockRow, VideoRecord
from use_cases.session_models import Identity

FilterMode = Literal["All", "With Video", "No Video"]
FILTER_MODES = ("All", "With Video", "No Video")

_WHITESPACE_RE = re.compile(r"\s+")
INDEX_WINDOW = 4


def normalize_plate(text: Optional[str]) -> str:
    """Strip all whitespace and upper-case. The only form ever compared."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub("", text).upper()


def match_videos(item: StockItem, videos: Sequence[VideoRecord]) -> Tuple[VideoRecord, ...]:
    plate = normalize_plate(item.registration_plate)
    if not plate:
        # An empty plate is a substring of every title; treat it as no match.
        return ()
    return tuple(v for v in videos if plate in normalize_plate(v.title))


def reconcile(stock: Sequence[StockItem], videos: Sequence[VideoRecord]) -> Dict[str, Tuple[VideoRecord, ...]]:
    """Naive O(stock x videos) join keyed by stock item id."""
    return {item.id: match_videos(item, videos) for item in stock}


class PlateIndex:
    """Finds every known plate occurring in a title with one pass over the title.

    Plates are bucketed by their first ``INDEX_WINDOW`` characters; each window
    of the title pulls candidates that are then confirmed with the same
    substring rule as ``match_videos``.
    """

    def __init__(self, plates: Iterable[str]):
        self._by_prefix: Dict[str, List[str]] = defaultdict(list)
        self._short: List[str] = []
        seen = set()
        for raw in plates:
            plate = normalize_plate(raw)
            if not plate or plate in seen:
                continue
            seen.add(plate)
            if len(plate) < INDEX_WINDOW:
                self._short.append(plate)
            else:
                self._by_prefix[plate[:INDEX_WINDOW]].append(plate)

    def plates_in(self, title: Optional[str]) -> set:
        text = normalize_plate(title)
        found = {p for p in self._short if p in text}
        for i in range(len(text) - INDEX_WINDOW + 1):
            for plate in self._by_prefix.get(text[i:i + INDEX_WINDOW], ()):
                if text.startswith(plate, i):
                    found.add(plate)
        return found


def reconcile_indexed(stock: Sequence[StockItem], videos: Sequence[VideoRecord]) -> Dict[str, Tuple[VideoRecord, ...]]:
    """Same result as ``reconcile``, built from a single scan of the video titles."""
    index = PlateIndex(item.registration_plate for item in stock)
    by_plate: Dict[str, List[VideoRecord]] = defaultdict(list)
    for video in videos:
        for plate in index.plates_in(video.title):
            by_plate[plate].append(video)

    joined = {}
    for item in stock:
        plate = normalize_plate(item.registration_plate)
        joined[item.id] = tuple(by_plate.get(plate, ())) if plate else ()
    return joined


def build_rows(stock: Sequence[StockItem], videos: Sequence[VideoRecord]) -> List[StockRow]:
    return [StockRow(item=item, videos=match_videos(item, videos)) for item in stock]


# --- SEARCH / FILTER ---

def search_stock(stock: Sequence[StockItem], text: Optional[str]) -> List[StockItem]:
    needle = (text or "").strip().lower()
    if not needle:
        return list(stock)
    plate_needle = normalize_plate(needle)

    def _hit(item: StockItem) -> bool:
        return (
            needle in item.make.lower()
            or needle in item.model.lower()
            or needle in item.registration_plate.lower()
            or plate_needle in normalize_plate(item.registration_plate)
        )

    return [item for item in stock if _hit(item)]


def filter_rows(rows: Sequence[StockRow], mode: FilterMode = "All") -> List[StockRow]:
    if mode not in FILTER_MODES:
        raise ValueError(f"unknown filter mode: {mode!r}")
    if mode == "With Video":
        return [r for r in rows if r.has_video]
    if mode == "No Video":
        return [r for r in rows if not r.has_video]
    return list(rows)


def reconcile_view(
    stock: Sequence[StockItem],
    videos: Sequence[VideoRecord],
    search_text: Optional[str] = "",
    filter_mode: FilterMode = "All",
) -> List[StockRow]:
    """Search, join, then filter by match status. Both filters AND together."""
    return filter_rows(build_rows(search_stock(stock, search_text), videos), filter_mode)


@dataclass(frozen=True)
class Page:
    rows: Tuple[StockRow, ...]
    page: int
    total_pages: int
    start_entry: int
    end_entry: int
    total_entries: int


def paginate(rows: Sequence[StockRow], page: int = 1, per_page: int = 10) -> Page:
    if per_page < 1:
        raise ValueError("per_page must be positive")
    total = len(rows)
    total_pages = max(1, math.ceil(total / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    chunk = tuple(rows[start:start + per_page])
    return Page(
        rows=chunk,
        page=page,
        total_pages=total_pages,
        start_entry=0 if total == 0 else start + 1,
        end_entry=min(start + per_page, total),
        total_entries=total,
    )


@dataclass(frozen=True)
class StockSummary:
    total: int
    with_video: int
    without_video: int


def summarize(rows: Sequence[StockRow]) -> StockSummary:
    with_video = sum(1 for r in rows if r.has_video)
    return StockSummary(total=len(rows), with_video=with_video, without_video=len(rows) - with_video)


# --- SHARE LINKS ---

def share_attribution(video: VideoRecord, sharer: Optional[Identity]) -> Optional[str]:
    """Whoever shares now wins over whoever uploaded."""
    if sharer is not None and sharer.display_name:
        return sharer.display_name
    return video.uploader_name or None


def build_share_link(base_url: str, video: VideoRecord, sharer: Optional[Identity]) -> str:
    link = f"{base_url.rstrip('/')}/view/{quote(video.id, safe='')}"
    ref = share_attribution(video, sharer)
    if ref:
        link += f"?ref={quote(ref, safe='')}"
    return link
