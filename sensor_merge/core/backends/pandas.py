from typing import Any, Dict, Iterable

import pandas as pd


class DataFrameBackend:
    def to_dataframe(self, rows: Iterable[Dict[str, Any]]) -> Any:
        raise NotImplementedError


class PandasBackend(DataFrameBackend):
    def to_dataframe(self, rows: Iterable[Dict[str, Any]]) -> pd.DataFrame:
        return pd.DataFrame(list(rows))
