from __future__ import annotations
from pathlib import Path
from typing import Any, Iterable, List, Union
import json
import os
import tempfile

from .config import OperationSpec, parse_operations
from .exceptions import ConfigError
from .models import AggregatedRecord
from .types import Json


def load_json_document(path: Union[str, Path]) -> Json:
    with open(path, "r", encoding="utf-8") as fin:
        return json.load(fin)


def load_operations(path: Union[str, Path]) -> List[OperationSpec]:
    try:
        raw: Any = load_json_document(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"configuration file is not valid UTF-8 JSON: {e}", path=str(path)) from e

    return parse_operations(raw)


def write_aggregated(records: Iterable[AggregatedRecord], path: Union[str, Path], *, indent: int = 2) -> None:
    """
    Write summaries as a pretty-printed JSON array.
    The file is staged next to the destination and moved into place once fully written.
    """
    payload = [r.to_json_dict() for r in records]
    dest = Path(path)
    dest.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=str(dest.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fout:
            json.dump(payload, fout, indent=indent, ensure_ascii=False)
            fout.write("\n")
        os.replace(tmp_path, dest)

    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
