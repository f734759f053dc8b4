from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict

from .exceptions import MappingError
from .utils import is_scalar, stringify_scalar

EQUALS = "=="


@dataclass(frozen=True)
class Predicate:
    """
    A derived-field expression evaluated against one source object.
    Only equality exists today; new kinds subclass this and register in `parse`.
    """
    field: str

    @property
    def op(self) -> str:
        raise NotImplementedError

    def evaluate(self, source: Dict[str, Any], *, path: str = "$") -> bool:
        raise NotImplementedError

    def lookup(self, source: Dict[str, Any], *, path: str) -> Any:
        if self.field not in source:
            raise MappingError(f"source field '{self.field}' not found", path=path)

        val = source[self.field]
        if not is_scalar(val):
            raise MappingError(
                f"source field '{self.field}' must be a scalar to compare, got {type(val).__name__}",
                path=path,
            )
        return val

    @staticmethod
    def parse(expr: Any, *, path: str = "$") -> "Predicate":
        if not isinstance(expr, str):
            raise MappingError(f"predicate must be a string, got {type(expr).__name__}", path=path)

        parts = expr.split(EQUALS)
        if len(parts) != 2:
            raise MappingError(f"predicate '{expr}' must contain exactly one '{EQUALS}'", path=path)

        field, literal = parts[0].strip(), parts[1].strip()
        if not field:
            raise MappingError(f"predicate '{expr}' is missing a source field name", path=path)

        return EqualsPredicate(field=field, literal=literal)


@dataclass(frozen=True)
class EqualsPredicate(Predicate):
    literal: str

    @property
    def op(self) -> str:
        return "eq"

    def evaluate(self, source: Dict[str, Any], *, path: str = "$") -> bool:
        return stringify_scalar(self.lookup(source, path=path)) == self.literal

    def __str__(self) -> str:
        return f"{self.field} {EQUALS} {self.literal}"
