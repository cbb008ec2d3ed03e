import pandas as pd
from typing import List, Optional, Sequence

from use_cases.domain_models import StockRow, StockSnapshot

STOCK_COLUMNS = ["Registration", "Make", "Model", "Derivative", "Mileage", "Status", "Videos"]


def build_stock_table(rows: Sequence[StockRow]) -> pd.DataFrame:
    """
    Flatten joined stock rows into a display DataFrame.
    Row order follows the input; an empty input still carries the columns.
    """
    records: List[dict] = []
    for row in rows:
        item = row.item
        records.append({
            "Registration": item.registration_plate,
            "Make": item.make,
            "Model": item.model,
            "Derivative": item.derivative,
            "Mileage": item.mileage,
            "Status": row.status,
            "Videos": row.video_count,
        })
    df = pd.DataFrame.from_records(records, columns=STOCK_COLUMNS)
    df["Mileage"] = pd.to_numeric(df["Mileage"], errors="coerce").astype("Int64")
    df["Videos"] = df["Videos"].astype(int)
    return df


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "N/A"
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(ts):
        return str(value)
    return ts.strftime("%d %b %Y, %H:%M")


def format_sync_status(snapshot: StockSnapshot) -> tuple[str, str]:
    """Return (level, message) describing the feed's last sync."""
    if not snapshot.ok:
        return "error", "Failed to load stock data."
    if snapshot.sync_status == "success":
        return "success", f"Last synced: {format_timestamp(snapshot.last_sync_time)} ({snapshot.total_vehicles} vehicles)"
    if snapshot.sync_status == "in_progress":
        return "info", "Stock sync in progress..."
    if snapshot.sync_status:
        return "warning", f"Stock sync status: {snapshot.sync_status}"
    return "info", f"{snapshot.total_vehicles} vehicles in stock"


def format_video_date(value: Optional[str]) -> str:
    return format_timestamp(value).split(",")[0]
