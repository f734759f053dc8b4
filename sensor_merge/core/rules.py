from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Tuple, Union

from .exceptions import ConfigError
from .predicates import Predicate

FLAG_PREFIX = "is"
TERMINAL_FIELD = "Value"


@dataclass(frozen=True)
class RenameRule:
    source_field: str
    target_name: str

    @property
    def is_terminal(self) -> bool:
        return self.target_name == TERMINAL_FIELD


@dataclass(frozen=True)
class FlagRule:
    target_name: str
    predicate: Predicate


@dataclass(frozen=True)
class NestedRule:
    source_field: str
    rules: "MappingRuleSet"


MappingRule = Union[RenameRule, FlagRule, NestedRule]


@dataclass(frozen=True)
class MappingRuleSet:
    """
    Rules for one level of a source document, keyed by source field name
    (or by the derived field name for flag rules).

    Evaluation is phased by rule kind, not by declaration order:
    flags, then renames, then nested descents.
    """
    rules: Tuple[MappingRule, ...] = ()
    path: str = "$"
    flags: Tuple[FlagRule, ...] = field(init=False, repr=False, compare=False)
    renames: Tuple[RenameRule, ...] = field(init=False, repr=False, compare=False)
    nested: Tuple[NestedRule, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "flags", tuple(r for r in self.rules if isinstance(r, FlagRule)))
        object.__setattr__(self, "renames", tuple(r for r in self.rules if isinstance(r, RenameRule)))
        object.__setattr__(self, "nested", tuple(r for r in self.rules if isinstance(r, NestedRule)))

    def __iter__(self) -> Iterator[MappingRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def emits(self) -> bool:
        return any(r.is_terminal for r in self.renames)

    def target_names(self) -> Tuple[str, ...]:
        names = [r.target_name for r in self.flags] + [r.target_name for r in self.renames]
        for n in self.nested:
            names.extend(n.rules.target_names())
        return tuple(names)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for r in self.rules:
            if isinstance(r, FlagRule):
                out[r.target_name] = str(r.predicate)
            elif isinstance(r, RenameRule):
                out[r.source_field] = r.target_name
            else:
                out[r.source_field] = r.rules.to_dict()
        return out


def parse_rule(key: str, value: Any, *, path: str) -> MappingRule:
    if not isinstance(key, str) or not key:
        raise ConfigError("rule keys must be non-empty strings", path=path)

    # Reserved prefix: always a derived flag, never a rename or descent.
    if key.startswith(FLAG_PREFIX):
        if not isinstance(value, str):
            raise ConfigError(
                f"flag rule '{key}' expects an equality string like 'Field == literal', got {type(value).__name__}",
                path=path,
            )
        return FlagRule(target_name=key, predicate=Predicate.parse(value, path=path))

    if isinstance(value, str):
        if not value.strip():
            raise ConfigError(f"rule '{key}' has an empty target name", path=path)
        return RenameRule(source_field=key, target_name=value)

    if isinstance(value, dict):
        return NestedRule(source_field=key, rules=parse_mapping_rule_set(value, path=path))

    raise ConfigError(
        f"rule '{key}' must be a target name, an equality string or a nested object, got {type(value).__name__}",
        path=path,
    )


def parse_mapping_rule_set(config_value: Any, *, path: str = "$") -> MappingRuleSet:
    if not isinstance(config_value, dict):
        raise ConfigError(f"mapping must be an object (dict), got {type(config_value).__name__}", path=path)

    if not config_value:
        raise ConfigError("mapping must not be empty", path=path)

    rules = tuple(parse_rule(k, v, path=f"{path}.{k}") for k, v in config_value.items())
    return MappingRuleSet(rules=rules, path=path)

