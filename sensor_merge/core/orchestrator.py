from __future__ import annotations
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple
import json
import logging
import time

from .aggregation import aggregate
from .config import MERGE, EngineConfig, OperationSpec, SourceSpec, TransformationSpec
from .context import ProjectionContext
from .exceptions import SensorMergeError, UnsupportedOperationError
from .io import load_json_document, write_aggregated
from .models import AggregatedRecord, RawRecord
from .projection import ProjectionInterpreter
from .types import Json

logger = logging.getLogger("sensor_merge")

DocumentLoader = Callable[[Path], Json]
ResultWriter = Callable[[List[AggregatedRecord], Path], None]


class MergeOrchestrator:
    """
    Runs merge operations one after another: load each source, project it with its
    transformation, aggregate everything the operation produced, write once.
    """
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        loader: Optional[DocumentLoader] = None,
        writer: Optional[ResultWriter] = None,
    ) -> None:
        self._config: EngineConfig = config or EngineConfig()
        self._log: logging.Logger = self._config.logger or logger
        self._loader: DocumentLoader = loader or load_json_document
        self._writer: ResultWriter = writer or self._write
        self._interpreter = ProjectionInterpreter(self._config)

    def run_operations(self, operations: Iterable[OperationSpec]) -> None:
        for op in operations:
            self.run_operation(op)

    def run_operation(self, op: OperationSpec) -> List[AggregatedRecord]:
        started = time.perf_counter()
        try:
            results = self._run(op)

        except Exception:
            if self._config.metrics_increment:
                self._config.metrics_increment("merge.operation_errors", 1)
            raise

        if self._config.metrics_observe:
            self._config.metrics_observe("merge.operation_seconds", time.perf_counter() - started)

        return results

    def _run(self, op: OperationSpec) -> List[AggregatedRecord]:
        if op.kind != MERGE:
            raise UnsupportedOperationError(
                f"operation '{op.kind}' is not supported (only '{MERGE}')",
                path=op.label,
            )

        # Every reference is resolved before any document is read.
        plan: List[Tuple[SourceSpec, TransformationSpec]] = [(s, op.transformation_for(s)) for s in op.sources]

        self._log.info("Starting %s with %d source(s)", op.label, len(plan))
        accumulator: List[RawRecord] = []

        for source, transformation in plan:
            before = len(accumulator)
            try:
                document = self._loader(self._config.resolve_path(source.file))
                self._interpreter.project(transformation.rules, document, ProjectionContext(), accumulator)

            except SensorMergeError as e:
                self._log.error("Failed %s on source '%s': %s", op.label, source.file, e)
                wrapped = type(e)(f"{op.label}, source '{source.file}' (transformation '{transformation.id}'): {e}")
                wrapped.path = e.path
                raise wrapped from e

            except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
                self._log.error("Cannot read source '%s' for %s: %s", source.file, op.label, e)
                raise

            self._log.info(
                "Projected %d record(s) from '%s' via '%s'",
                len(accumulator) - before, source.file, transformation.id,
            )

        results = aggregate(accumulator, backend=self._config.backend)
        if self._config.metrics_increment:
            self._config.metrics_increment("merge.groups_aggregated", len(results))

        destination = self._config.resolve_path(op.destination)
        self._writer(results, destination)
        self._log.info("Wrote %d device summary(ies) to %s", len(results), destination)
        return results

    def _write(self, records: List[AggregatedRecord], path: Path) -> None:
        write_aggregated(records, path, indent=self._config.indent)


def run_operations(operations: Iterable[OperationSpec], config: Optional[EngineConfig] = None) -> None:
    MergeOrchestrator(config).run_operations(operations)
