from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from .config import EngineConfig
from .context import ProjectionContext, RawRecordBuilder
from .exceptions import MappingError
from .models import RawRecord
from .rules import MappingRuleSet, NestedRule
from .types import Json
from .utils import is_scalar

logger = logging.getLogger("sensor_merge")


class ProjectionInterpreter:
    """
    Walks a source JSON document against a mapping rule set and emits a RawRecord
    every time the terminal 'Value' field is resolved.

    Per object, rules are applied in phases:
      1. flag rules   (derived booleans from 'Field == literal')
      2. rename rules (scalar copies into canonical fields)
      3. emission     (if this level maps 'Value')
      4. nested rules (one descent per array element, or once for an object)

    Contexts flow strictly downwards: children inherit a copy of the parent's
    resolved fields, siblings are isolated from each other.
    """
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self._config: EngineConfig = config or EngineConfig()
        self._log: logging.Logger = self._config.logger or logger
        self._trace_enabled = bool(self._config.trace_enabled)
        self._traces: Optional[List[Dict[str, Any]]] = None

    def project(
        self,
        rule_set: MappingRuleSet,
        source: Json,
        context: Optional[ProjectionContext] = None,
        sink: Optional[List[RawRecord]] = None,
    ) -> List[RawRecord]:
        out: List[RawRecord] = sink if sink is not None else []
        before = len(out)
        ctx = context if context is not None else ProjectionContext()

        if isinstance(source, list):
            for i, item in enumerate(source):
                self._project_object(rule_set, item, ctx.descend(f"{ctx.path}[{i}]"), out)
        else:
            self._project_object(rule_set, source, ctx, out)

        if self._config.metrics_increment:
            self._config.metrics_increment("merge.records_projected", len(out) - before)

        return out

    def trace(self, rule_set: MappingRuleSet, source: Json) -> Dict[str, Any]:
        self._traces = []
        try:
            records = self.project(rule_set, source)
            return {"records_emitted": len(records), "emissions": self._traces}

        finally:
            self._traces = None

    def _project_object(self, rule_set: MappingRuleSet, source: Any, ctx: ProjectionContext, out: List[RawRecord]) -> None:
        if not isinstance(source, dict):
            raise MappingError(
                f"expected an object to apply mapping, got {type(source).__name__}",
                path=ctx.path,
            )

        resolved: Dict[str, Any] = {}

        for rule in rule_set.flags:
            resolved[rule.target_name] = rule.predicate.evaluate(source, path=f"{ctx.path}.{rule.target_name}")

        for rule in rule_set.renames:
            val = self._lookup(source, rule.source_field, ctx.path)
            if not is_scalar(val):
                raise MappingError(
                    f"'{rule.source_field}' maps to '{rule.target_name}' but holds a {type(val).__name__}; "
                    "nested values need a nested mapping object",
                    path=f"{ctx.path}.{rule.source_field}",
                )
            resolved[rule.target_name] = val

        ctx = ctx.with_values(resolved)

        if rule_set.emits:
            self._emit(ctx, out)

        for rule in rule_set.nested:
            self._descend(rule, source, ctx, out)

    def _descend(self, rule: NestedRule, source: Dict[str, Any], ctx: ProjectionContext, out: List[RawRecord]) -> None:
        child = self._lookup(source, rule.source_field, ctx.path)
        path = f"{ctx.path}.{rule.source_field}"

        if isinstance(child, list):
            for i, item in enumerate(child):
                self._project_object(rule.rules, item, ctx.descend(f"{path}[{i}]"), out)

        elif isinstance(child, dict):
            self._project_object(rule.rules, child, ctx.descend(path), out)

        else:
            raise MappingError(
                f"nested mapping expects an array or object, got {type(child).__name__}",
                path=path,
            )

    def _emit(self, ctx: ProjectionContext, out: List[RawRecord]) -> None:
        record = RawRecordBuilder.from_context(ctx).build(path=ctx.path)
        out.append(record)

        if self._traces is not None:
            self._traces.append({"path": ctx.path, "context": ctx.as_dict()})
        if self._trace_enabled:
            self._log.debug("Emitted record at %s: %s", ctx.path, record)

    @staticmethod
    def _lookup(source: Dict[str, Any], key: str, path: str) -> Any:
        if key not in source:
            raise MappingError(f"source field '{key}' not found", path=path)

        return source[key]


def project(
    rule_set: MappingRuleSet,
    source: Json,
    context: Optional[ProjectionContext] = None,
    sink: Optional[List[RawRecord]] = None,
    *,
    config: Optional[EngineConfig] = None,
) -> List[RawRecord]:
    return ProjectionInterpreter(config).project(rule_set, source, context, sink)

