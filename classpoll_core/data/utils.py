from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd


def generate_id() -> str:
    """Collision-resistant identifier for new rows."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse whatever Supabase returns for a timestamp column into an aware
    UTC datetime. Naive values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    ts = pd.Timestamp(value)
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    else:
        ts = ts.tz_convert("UTC")
    return ts.to_pydatetime()


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Form inputs hand back '' for "no class"; the store wants NULL."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
