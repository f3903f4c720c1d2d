"""Run artifact writers: element JSON, diagnostics log and run report."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def write_elements_json(
    elements: Iterable[Mapping[str, Any]],
    output_file: str,
) -> int:
    """Write element dicts as one pretty-printed JSON array.

    The payload is fully encoded before the file is opened, so an encoding
    failure leaves any previous output untouched.

    Returns:
        Number of elements written.

    Raises:
        OSError: If the file cannot be written.
        TypeError, ValueError: If an element is not JSON serializable.
    """
    payload = list(elements)
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    _ensure_parent_dir(output_file)
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(text)
        f.write("\n")
    return len(payload)


def write_diagnostics_log(lines: Iterable[str], log_file: str) -> int:
    """Write one diagnostic per line and return the number of lines written."""
    _ensure_parent_dir(log_file)
    count = 0
    with open(log_file, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line.rstrip("\n"))
            f.write("\n")
            count += 1
    return count


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON run report and return its path."""
    os.makedirs(output_dir, exist_ok=True)
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    path = os.path.join(output_dir, f"{run_id}.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    return path
