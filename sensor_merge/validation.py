from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from sensor_merge.core import (
    MERGE,
    EngineConfig,
    OperationDescriptor,
    ProjectionInterpreter,
    SensorMergeError,
    parse_mapping_rule_set,
    parse_rule,
)


def validate_mapping(mapping: Any, *, path: str = "$") -> Tuple[bool, List[str]]:
    """Collect every rule error in a mapping instead of stopping at the first one."""
    errors: List[str] = []

    def walk(node: Any, node_path: str) -> None:
        if not isinstance(node, dict) or not node:
            errors.append(f"{node_path}: mapping must be a non-empty object")
            return

        for k, v in node.items():
            rule_path = f"{node_path}.{k}"
            if isinstance(v, dict) and isinstance(k, str) and not k.startswith("is"):
                walk(v, rule_path)
                continue

            try:
                parse_rule(k, v, path=rule_path)
            except SensorMergeError as e:
                errors.append(str(e))

    walk(mapping, path)
    return (len(errors) == 0, errors)


def validate_operations(raw: Any) -> Tuple[bool, List[str]]:
    errors: List[str] = []
    items = [raw] if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        return False, ["$: configuration must be an array of operations"]

    for i, item in enumerate(items):
        op_path = f"$[{i}]"
        try:
            desc = OperationDescriptor.model_validate(item)
        except ValidationError as e:
            for err in e.errors():
                loc = ".".join(str(p) for p in err["loc"])
                errors.append(f"{op_path}.{loc}: {err['msg']}")
            continue

        if desc.operation != MERGE:
            errors.append(f"{op_path}.operation: '{desc.operation}' is not supported (only '{MERGE}')")

        seen = set()
        for j, t in enumerate(desc.transformations):
            if t.id in seen:
                errors.append(f"{op_path}.transformations[{j}]: duplicate transformation id '{t.id}'")
            seen.add(t.id)
            errors.extend(validate_mapping(t.mapping, path=f"{op_path}.transformations[{j}].mapping")[1])

        for j, s in enumerate(desc.sources):
            if s.transformation not in seen:
                errors.append(f"{op_path}.sources[{j}]: unknown transformation '{s.transformation}'")

    return (len(errors) == 0, errors)


def dry_run(mapping: Dict[str, Any], sample: Any) -> Dict[str, Any]:
    try:
        rules = parse_mapping_rule_set(mapping)
    except SensorMergeError as e:
        return {"ok": False, "stage": "structure", "error": str(e)}

    interp = ProjectionInterpreter(EngineConfig(trace_enabled=True))
    try:
        trace = interp.trace(rules, sample)
    except SensorMergeError as e:
        return {"ok": False, "stage": "projection", "error": str(e)}

    return {
        "ok": True,
        "records": trace["records_emitted"],
        "mapping": rules.to_dict(),
        "fields": sorted(set(rules.target_names())),
        "trace": trace["emissions"],
    }
