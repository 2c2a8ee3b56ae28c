"""Capacity and output checks.

Each check only reports; callers decide whether a failed check is fatal.
"""

from pathlib import Path
from typing import List

from .parsers import output_paths
from .planner import RunRequest


def fits(request: RunRequest) -> bool:
    """True if the requested cores do not exceed the pool capacity."""
    return request.total_cores_requested <= request.total_cores_available


def fills(request: RunRequest) -> bool:
    """True if the requested cores use the pool capacity exactly."""
    return request.total_cores_requested == request.total_cores_available


def existing_outputs(output_template: str, num_runs: int) -> List[Path]:
    """Return the output files of the runs that already exist."""
    return [path for path in output_paths(output_template, num_runs) if path.exists()]


def overwrite_safe(output_template: str, num_runs: int) -> bool:
    """True if none of the output files of the runs exists yet."""
    return not existing_outputs(output_template, num_runs)
