from .pandas import DataFrameBackend, PandasBackend

__all__ = ["DataFrameBackend", "PandasBackend"]
