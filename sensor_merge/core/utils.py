from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd

SCALAR_TYPES = (str, int, float, bool)


def is_scalar(x: Any) -> bool:
    return x is None or isinstance(x, SCALAR_TYPES)


def stringify_scalar(x: Any) -> str:
    """
    Render a JSON scalar as comparison text:
    strings verbatim, booleans as True/False, null as an empty string.
    """
    if x is None:
        return ""

    if isinstance(x, str):
        return x

    if isinstance(x, bool):
        return "True" if x else "False"

    return json.dumps(x)


def parse_timestamp(src: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string (or anything pandas understands) into a naive UTC datetime.
    Aware values are converted to UTC so readings from different feeds stay comparable.
    """
    if src is None or isinstance(src, bool):
        return None

    if isinstance(src, datetime):
        dt = src
    else:
        s = str(src).strip()
        if not s:
            return None

        try:
            dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            _ts = pd.to_datetime(s, utc=False, errors="coerce")
            if pd.isna(_ts):
                return None

            dt = _ts.to_pydatetime()

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)

    return dt
