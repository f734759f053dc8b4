from .exceptions import (
    SensorMergeError,
    ConfigError,
    UnsupportedOperationError,
    MappingError,
    MalformedRecordError,
)
from .predicates import Predicate, EqualsPredicate
from .rules import (
    FLAG_PREFIX,
    TERMINAL_FIELD,
    RenameRule,
    FlagRule,
    NestedRule,
    MappingRuleSet,
    parse_rule,
    parse_mapping_rule_set,
)
from .models import RawRecord, AggregatedRecord
from .context import ProjectionContext, RawRecordBuilder
from .config import (
    MERGE,
    EngineConfig,
    OperationDescriptor,
    OperationSpec,
    SourceSpec,
    TransformationSpec,
    parse_operations,
)
from .backends.pandas import DataFrameBackend, PandasBackend
from .projection import ProjectionInterpreter, project
from .aggregation import aggregate
from .io import load_json_document, load_operations, write_aggregated
from .orchestrator import MergeOrchestrator, run_operations

__all__ = [
    "SensorMergeError",
    "ConfigError",
    "UnsupportedOperationError",
    "MappingError",
    "MalformedRecordError",
    "Predicate",
    "EqualsPredicate",
    "FLAG_PREFIX",
    "TERMINAL_FIELD",
    "RenameRule",
    "FlagRule",
    "NestedRule",
    "MappingRuleSet",
    "parse_rule",
    "parse_mapping_rule_set",
    "RawRecord",
    "AggregatedRecord",
    "ProjectionContext",
    "RawRecordBuilder",
    "MERGE",
    "EngineConfig",
    "OperationDescriptor",
    "OperationSpec",
    "SourceSpec",
    "TransformationSpec",
    "parse_operations",
    "DataFrameBackend",
    "PandasBackend",
    "ProjectionInterpreter",
    "project",
    "aggregate",
    "load_json_document",
    "load_operations",
    "write_aggregated",
    "MergeOrchestrator",
    "run_operations",
]
