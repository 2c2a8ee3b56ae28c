"""Rendering and writing of machinefiles."""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, List

from .errors import AllocationError, AllocationExhausted
from .strategies import Assignment

logger = logging.getLogger(__name__)


def render_machinefiles(assignment: Assignment, node_pool: List[str]) -> Dict[int, List[str]]:
    """Turn node positions into ``<node>:<cores>`` lines for every run.

    Raises:
        AllocationExhausted: if a position lies past the end of the node pool,
            which happens when the node count was overridden with a value
            larger than the pool
    """
    rendered: Dict[int, List[str]] = {}
    for run_index, shares in assignment.items():
        lines = []
        for node, cores in shares:
            if node > len(node_pool):
                raise AllocationExhausted(run_index, node, len(node_pool))
            lines.append(f"{node_pool[node - 1]}:{cores}")
        rendered[run_index] = lines
    return rendered


def _file_mode(target: Path) -> int:
    try:
        return stat.S_IMODE(os.stat(target).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_machinefile(output_file: Path, lines: List[str]) -> None:
    """Replace ``output_file`` with ``lines`` in one step.

    The content goes to a temporary file next to the target first, so readers
    never see a half-written machinefile. A symlinked target is written
    through: the file it points to is replaced and the link is kept. The new
    file keeps the mode of the file it replaces, or gets the default mode
    under the current umask.
    """
    target = Path(os.path.realpath(output_file))
    mode = _file_mode(target)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(fd, 'w') as f:
            for line in lines:
                print(line, file=f)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        os.unlink(tmp_name)
        raise


def write_machinefiles(rendered: Dict[int, List[str]], paths: List[Path]) -> None:
    """Write the rendered lines of run ``i`` to ``paths[i - 1]``."""
    for run_index, lines in rendered.items():
        output_file = paths[run_index - 1]
        try:
            write_machinefile(output_file, lines)
        except OSError as e:
            raise AllocationError(f"Cannot write {output_file}: {e.strerror or e}") from e
        logger.info("Wrote %s (%d node(s))", output_file, len(lines))
