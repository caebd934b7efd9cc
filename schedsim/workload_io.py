from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List

from .errors import WorkloadError
from .models import ProcessSpec

# Eight processes alternating CPU and I/O bursts, starting and ending with CPU.
SAMPLE_WORKLOAD = [
    ("P1", [4, 5, 3, 5, 4, 6, 4, 5, 2], [24, 73, 31, 27, 33, 43, 64, 19]),
    ("P2", [18, 19, 11, 18, 19, 18, 17, 19, 10], [31, 35, 42, 43, 47, 43, 51, 32]),
    ("P3", [6, 4, 7, 4, 5, 7, 8, 6, 5], [18, 21, 19, 16, 29, 21, 22, 24]),
    ("P4", [17, 19, 20, 17, 15, 12, 15, 14], [42, 55, 54, 52, 67, 72, 66]),
    ("P5", [5, 4, 5, 3, 5, 4, 3, 4, 3, 5], [81, 82, 71, 61, 62, 51, 77, 61, 42]),
    ("P6", [10, 12, 14, 11, 15, 13, 11], [35, 41, 33, 32, 41, 29]),
    ("P7", [21, 23, 24, 22, 21, 20], [51, 53, 61, 31, 43]),
    ("P8", [11, 14, 15, 17, 16, 12, 13, 15], [52, 42, 31, 21, 43, 31, 32]),
]


def sample_workload() -> List[ProcessSpec]:
    return [ProcessSpec(name, tuple(cpu), tuple(io)) for name, cpu, io in SAMPLE_WORKLOAD]


def load_workload(path: str | Path) -> List[ProcessSpec]:
    """
    Load a workload from a JSON or CSV file into a list of ProcessSpec objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise WorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[ProcessSpec]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise WorkloadError(f"Malformed JSON workload {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    return [_spec_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[ProcessSpec]:
    specs: List[ProcessSpec] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            specs.append(_spec_from_mapping(row))
    return specs


def _parse_bursts(value) -> List[int]:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        # "4 5 3" or "4;5;3"
        return [int(token) for token in value.replace(";", " ").split()]
    return [int(v) for v in value]


def _spec_from_mapping(mapping) -> ProcessSpec:
    try:
        name = str(mapping["name"])
        cpu_bursts = _parse_bursts(mapping["cpu_bursts"])
        io_bursts = _parse_bursts(mapping.get("io_bursts"))
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise WorkloadError(f"Invalid process entry: {mapping!r}") from exc

    return ProcessSpec(name=name, cpu_bursts=tuple(cpu_bursts), io_bursts=tuple(io_bursts))
