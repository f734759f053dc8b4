from __future__ import annotations
from typing import Any, Iterable, List, Optional

import pandas as pd

from .backends.pandas import DataFrameBackend, PandasBackend
from .models import AggregatedRecord, RawRecord

GROUP_KEY = ["company_id", "device_id"]


def aggregate(records: Iterable[RawRecord], *, backend: Optional[DataFrameBackend] = None) -> List[AggregatedRecord]:
    """
    Fold raw readings into one summary per (company_id, device_id).

    Groups appear in order of first occurrence. Names come from the first record
    of each group; averages are None when the group has no reading of that kind.
    """
    rows = [r.model_dump() for r in records]
    if not rows:
        return []

    df = (backend or PandasBackend()).to_dataframe(rows)
    df["temperature_value"] = df["value"].where(df["is_temperature"])
    df["humidity_value"] = df["value"].where(df["is_humidity"])

    summary = (
        df.groupby(GROUP_KEY, sort=False)
        .agg(
            company_name=("company_name", "first"),
            device_name=("device_name", "first"),
            first_reading_at=("created_at", "min"),
            last_reading_at=("created_at", "max"),
            temperature_count=("is_temperature", "sum"),
            average_temperature=("temperature_value", "mean"),
            humidity_count=("is_humidity", "sum"),
            average_humidity=("humidity_value", "mean"),
        )
        .reset_index()
    )

    return [_to_record(row) for row in summary.to_dict(orient="records")]


def _to_record(row: dict) -> AggregatedRecord:
    return AggregatedRecord(
        company_id=int(row["company_id"]),
        company_name=str(row["company_name"]),
        device_id=int(row["device_id"]),
        device_name=str(row["device_name"]),
        first_reading_at=_to_datetime(row["first_reading_at"]),
        last_reading_at=_to_datetime(row["last_reading_at"]),
        temperature_count=int(row["temperature_count"]),
        average_temperature=_nullable_float(row["average_temperature"]) if row["temperature_count"] else None,
        humidity_count=int(row["humidity_count"]),
        average_humidity=_nullable_float(row["average_humidity"]) if row["humidity_count"] else None,
    )


def _to_datetime(x: Any):
    return pd.Timestamp(x).to_pydatetime()


def _nullable_float(x: Any) -> Optional[float]:
    if x is None or pd.isna(x):
        return None

    return float(x)
