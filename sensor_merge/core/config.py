from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .backends.pandas import DataFrameBackend, PandasBackend
from .exceptions import ConfigError
from .rules import MappingRuleSet, parse_mapping_rule_set

MERGE = "merge"


@dataclass
class EngineConfig:
    data_dir: Optional[Union[str, Path]] = None
    indent: int = 2
    trace_enabled: bool = False
    backend: DataFrameBackend = field(default_factory=PandasBackend)

    logger: Optional[logging.Logger] = None
    metrics_increment: Optional[Callable[[str, int], None]] = None
    metrics_observe: Optional[Callable[[str, float], None]] = None

    def resolve_path(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        if p.is_absolute() or self.data_dir is None:
            return p
        return Path(self.data_dir) / p


# Raw configuration shape, validated before rule sets are parsed.

class SourceDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    file: str = Field(min_length=1)
    transformation: str = Field(min_length=1)


class TransformationDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    mapping: Dict[str, Any]


class OperationDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    operation: str
    sources: List[SourceDescriptor]
    transformations: List[TransformationDescriptor] = Field(default_factory=list)
    destination: str = Field(min_length=1)


@dataclass(frozen=True)
class TransformationSpec:
    id: str
    rules: MappingRuleSet


@dataclass(frozen=True)
class SourceSpec:
    file: str
    transformation_id: str


@dataclass(frozen=True)
class OperationSpec:
    kind: str
    sources: Tuple[SourceSpec, ...]
    transformations: Dict[str, TransformationSpec]
    destination: str
    index: int = 0

    @property
    def label(self) -> str:
        return f"operation #{self.index} ({self.kind} -> {self.destination})"

    def transformation_for(self, source: SourceSpec) -> TransformationSpec:
        try:
            return self.transformations[source.transformation_id]
        except KeyError:
            raise ConfigError(
                f"source '{source.file}' references unknown transformation '{source.transformation_id}' "
                f"(known: {sorted(self.transformations)})",
                path=f"{self.label}.sources",
            ) from None

    @classmethod
    def from_descriptor(cls, desc: OperationDescriptor, *, index: int = 0) -> "OperationSpec":
        table: Dict[str, TransformationSpec] = {}
        for i, t in enumerate(desc.transformations):
            path = f"$[{index}].transformations[{i}]"
            if t.id in table:
                raise ConfigError(f"duplicate transformation id '{t.id}'", path=path)
            table[t.id] = TransformationSpec(id=t.id, rules=parse_mapping_rule_set(t.mapping, path=f"{path}.mapping"))

        return cls(
            kind=desc.operation,
            sources=tuple(SourceSpec(file=s.file, transformation_id=s.transformation) for s in desc.sources),
            transformations=table,
            destination=desc.destination,
            index=index,
        )


def parse_operations(raw: Any) -> List[OperationSpec]:
    """
    Build operation specs from a decoded configuration document.
    A single operation object is accepted as a one-element list.
    """
    if isinstance(raw, dict):
        raw = [raw]

    if not isinstance(raw, list):
        raise ConfigError(f"configuration must be an array of operations, got {type(raw).__name__}", path="$")

    ops: List[OperationSpec] = []
    for i, item in enumerate(raw):
        try:
            desc = OperationDescriptor.model_validate(item)
        except ValidationError as e:
            raise ConfigError(f"invalid operation descriptor: {_summarize(e)}", path=f"$[{i}]") from e

        ops.append(OperationSpec.from_descriptor(desc, index=i))

    return ops


def _summarize(err: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or '<root>'}: {e['msg']}" for e in err.errors()
    )
