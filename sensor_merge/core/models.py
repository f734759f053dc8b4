from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import is_scalar, parse_timestamp, stringify_scalar


class RawRecord(BaseModel):
    """One normalized reading, fully resolved by the projection interpreter."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    company_id: int
    company_name: str
    device_id: int
    device_name: str
    is_temperature: bool
    is_humidity: bool
    created_at: datetime
    value: float

    @field_validator("company_name", "device_name", mode="before")
    @classmethod
    def _scalar_to_str(cls, v: Any) -> Any:
        if v is not None and is_scalar(v):
            return stringify_scalar(v)
        return v

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, v: Any) -> datetime:
        dt = parse_timestamp(v)
        if dt is None:
            raise ValueError(f"unparseable timestamp: {v!r}")
        return dt


class AggregatedRecord(BaseModel):
    """Per-device summary; serialized with the canonical attribute names."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    company_id: int = Field(alias="CompanyId")
    company_name: str = Field(alias="CompanyName")
    device_id: int = Field(alias="DeviceId")
    device_name: str = Field(alias="DeviceName")
    first_reading_at: datetime = Field(alias="FirstReadingDtm")
    last_reading_at: datetime = Field(alias="LastReadingDtm")
    temperature_count: int = Field(alias="TemperatureCount")
    average_temperature: Optional[float] = Field(default=None, alias="AverageTemperature")
    humidity_count: int = Field(alias="HumidityCount")
    average_humidity: Optional[float] = Field(default=None, alias="AverageHumidity")

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
