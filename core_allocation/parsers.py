"""Parsers and utility functions for machinefile allocation.

This module contains functions for loading the node pool, expanding
compressed Slurm hostlists and naming the per-run output files.
"""

import logging
from pathlib import Path
from typing import List

from .errors import ConfigurationError, SourceUnavailable

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_TEMPLATE = "machinefile_{index}"


def _split_top_level(raw_string: str) -> List[str]:
    """Split on commas that are not inside brackets."""
    parts: List[str] = []
    depth = 0
    current = ""
    for char in raw_string:
        if char == '[':
            depth += 1
        elif char == ']':
            depth -= 1
        if char == ',' and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += char
    parts.append(current)
    return [part.strip() for part in parts if part.strip()]


def expand_nodes(raw_string: str) -> List[str]:
    """Expand a compressed hostlist into a list of node names.

    Args:
        raw_string: Hostlist such as "pool1-1195,pool1-[2110-2111]"
                    or "hgx-isr1-[001-003,007]"

    Returns:
        List of expanded node names, in the order they appear
    """
    expanded: List[str] = []
    for spec in _split_top_level(raw_string):
        # Handle range format: prefix[start-end,...]suffix
        if ('[' in spec) != (']' in spec):
            raise ValueError(f"Unbalanced brackets in {spec!r}")
        if '[' in spec:
            prefix, rest = spec.split('[', 1)
            range_part, suffix = rest.split(']', 1)
            for item in range_part.split(','):
                if '-' in item:
                    start_str, end_str = item.split('-', 1)
                    start = int(start_str)
                    end = int(end_str)
                    if end < start:
                        raise ValueError(f"Reversed range {item!r} in {spec!r}")
                    # Determine padding based on start number's string representation
                    padding = len(start_str)
                    for num in range(start, end + 1):
                        expanded.append(f"{prefix}{num:0{padding}d}{suffix}")
                else:
                    # Single number in brackets
                    expanded.append(f"{prefix}{int(item):0{len(item)}d}{suffix}")
        else:
            expanded.append(spec)

    return expanded


def parse_node_pool(node_pool_file: str) -> List[str]:
    """Parse a file listing the allocated nodes, one identifier per line.

    Blank lines are ignored and order is preserved; a node listed several
    times (as in PBS nodefiles) appears several times in the pool.

    Args:
        node_pool_file: Path to the node file

    Returns:
        List of node names

    Raises:
        SourceUnavailable: if the file is missing, unreadable or empty
    """
    try:
        with open(node_pool_file) as f:
            node_pool = [line.strip() for line in f if line.strip()]
    except (OSError, UnicodeDecodeError) as e:
        reason = getattr(e, 'strerror', None) or e
        raise SourceUnavailable(f"Cannot read node file {node_pool_file}: {reason}") from e

    if not node_pool:
        raise SourceUnavailable(f"Node file {node_pool_file} lists no nodes")
    logger.debug("Read %d node(s) from %s", len(node_pool), node_pool_file)
    return node_pool


def parse_node_list(node_list: str) -> List[str]:
    """Parse a compressed hostlist string into the node pool."""
    try:
        node_pool = expand_nodes(node_list)
    except ValueError as e:
        raise SourceUnavailable(f"Malformed node list {node_list!r}") from e

    if not node_pool:
        raise SourceUnavailable("Node list is empty")
    return node_pool


def output_path(output_template: str, index: int) -> Path:
    """Name the output file of run ``index`` (1-based)."""
    try:
        return Path(output_template.format(index=index))
    except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid output template {output_template!r}, use '{{index}}' for the run number"
        ) from e


def output_paths(output_template: str, num_runs: int) -> List[Path]:
    """Name the output files of runs 1..num_runs.

    Raises:
        ConfigurationError: if two runs would write the same file
    """
    paths = [output_path(output_template, index) for index in range(1, num_runs + 1)]
    if len(set(paths)) != len(paths):
        raise ConfigurationError(
            f"Output template {output_template!r} does not name a distinct file per run"
        )
    return paths
