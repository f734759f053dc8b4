from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterator, List, Mapping, Optional

from pydantic import ValidationError

from .exceptions import MalformedRecordError
from .models import RawRecord

# canonical context key -> RawRecord attribute
CANONICAL_FIELDS: Dict[str, str] = {
    "CompanyId": "company_id",
    "CompanyName": "company_name",
    "DeviceId": "device_id",
    "DeviceName": "device_name",
    "isTemperature": "is_temperature",
    "isHumidity": "is_humidity",
    "Dtm": "created_at",
    "Value": "value",
}


class ProjectionContext:
    """
    Immutable view of the canonical fields resolved so far on one branch of a source document.
    Each descent derives a new context, so sibling branches never observe each other's fields.
    """
    __slots__ = ("_values", "path")

    def __init__(self, values: Optional[Mapping[str, Any]] = None, path: str = "$") -> None:
        self._values: Dict[str, Any] = dict(values or {})
        self.path = path

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ProjectionContext(path={self.path!r}, values={self._values!r})"

    def with_values(self, updates: Mapping[str, Any], *, path: Optional[str] = None) -> "ProjectionContext":
        merged = dict(self._values)
        merged.update(updates)
        return ProjectionContext(merged, path or self.path)

    def descend(self, path: str) -> "ProjectionContext":
        return ProjectionContext(self._values, path)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)


@dataclass
class RawRecordBuilder:
    company_id: Any = None
    company_name: Any = None
    device_id: Any = None
    device_name: Any = None
    is_temperature: Any = None
    is_humidity: Any = None
    created_at: Any = None
    value: Any = None

    @classmethod
    def from_context(cls, ctx: ProjectionContext) -> "RawRecordBuilder":
        return cls(**{attr: ctx.get(key) for key, attr in CANONICAL_FIELDS.items()})

    def missing(self) -> List[str]:
        by_attr = {attr: key for key, attr in CANONICAL_FIELDS.items()}
        return [by_attr[f.name] for f in fields(self) if getattr(self, f.name) is None]

    def build(self, *, path: str = "$") -> RawRecord:
        missing = self.missing()
        if missing:
            raise MalformedRecordError(
                f"'Value' resolved before required fields were mapped: missing {missing}",
                path=path,
            )

        try:
            return RawRecord(**{f.name: getattr(self, f.name) for f in fields(self)})
        except ValidationError as e:
            bad = ", ".join(
                f"{_canonical_name(err['loc'])}={err.get('input')!r} ({err['msg']})" for err in e.errors()
            )
            raise MalformedRecordError(f"could not coerce record fields: {bad}", path=path) from e


def _canonical_name(loc: Any) -> str:
    attr = loc[0] if loc else "?"
    for key, a in CANONICAL_FIELDS.items():
        if a == attr:
            return key
    return str(attr)
