#!/usr/bin/env python3
"""Split allocated nodes into one machinefile per run.

This script takes the list of nodes allocated to a job and distributes their
cores between a number of runs that each need the same core count. Runs get
whole nodes first; leftover cores of consecutive runs are packed together on
shared nodes.

Example usage:
    python split_machinefiles.py --nodefile $PBS_NODEFILE --cores-per-node 4 --cores-per-run 10 --num-runs 4
"""

import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import click

from core_allocation.errors import CapacityError, ConfigurationError, OverwriteConflict
from core_allocation.parsers import (
    DEFAULT_OUTPUT_TEMPLATE,
    output_paths,
    parse_node_list,
    parse_node_pool
)
from core_allocation.planner import RunRequest, plan_allocation
from core_allocation.report import AllocationSummary
from core_allocation.strategies import assign_nodes_to_runs
from core_allocation.validation import existing_outputs, fills, fits, overwrite_safe
from core_allocation.writers import render_machinefiles, write_machinefiles

logger = logging.getLogger(__name__)


def log_level(verbose: int) -> int:
    """Map the number of -v flags to a logging level."""
    if verbose == 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def load_node_pool(nodefile: Optional[str], nodelist: Optional[str]) -> List[str]:
    """Read the node pool from a nodefile, or else from a compressed hostlist."""
    if nodefile:
        if nodelist:
            logger.debug("Both a nodefile and a nodelist were given, using %s", nodefile)
        return parse_node_pool(nodefile)
    if nodelist:
        return parse_node_list(nodelist)
    raise ConfigurationError("No node pool given: pass --nodefile or --nodelist")


def process_request(
    node_pool: Optional[List[str]],
    cores_per_run: int,
    cores_per_node: int,
    num_runs: int,
    total_nodes: Optional[int] = None,
    output_template: str = DEFAULT_OUTPUT_TEMPLATE,
    check_fit: bool = False,
    check_fill: bool = False,
    no_clobber: bool = False,
    dry_run: bool = False
) -> Dict[Path, List[str]]:
    """Core processing logic that orchestrates the machinefile split.

    This function validates the request, plans and assigns the nodes, and
    writes one machinefile per run. Nothing is written until every run has
    been assigned.

    Args:
        node_pool: Ordered node names; may be None for a dry run with total_nodes
        cores_per_run: Cores needed by every run
        cores_per_node: Cores offered by every node
        num_runs: Number of runs
        total_nodes: Override for the number of usable nodes
        output_template: Output file name with an '{index}' placeholder
        check_fit: Abort if the runs need more cores than available
        check_fill: Abort unless the runs use exactly the available cores
        no_clobber: Abort if any output file already exists
        dry_run: Print a summary instead of writing files

    Returns:
        dict: output path -> lines written (empty for a dry run)
    """
    if node_pool is None and total_nodes is None:
        raise ConfigurationError("The node pool is required unless --total-nodes is given")

    request = RunRequest.for_pool(node_pool or [], cores_per_run, cores_per_node, num_runs, total_nodes)
    plan = plan_allocation(request.cores_per_run, request.cores_per_node)
    paths = output_paths(output_template, request.num_runs)

    if dry_run:
        for line in AllocationSummary.from_request(request, plan).lines():
            click.echo(line)
        return {}

    if node_pool is None:
        raise ConfigurationError("The node pool is required to write machinefiles")

    if check_fit and not fits(request):
        raise CapacityError(
            f"Requested cores ({request.total_cores_requested}) exceed available cores "
            f"({request.total_cores_available})"
        )
    if check_fill and not fills(request):
        raise CapacityError(
            f"Requested cores ({request.total_cores_requested}) do not fill available cores "
            f"({request.total_cores_available})"
        )
    if no_clobber and not overwrite_safe(output_template, request.num_runs):
        conflicts = existing_outputs(output_template, request.num_runs)
        raise OverwriteConflict(
            f"Refusing to overwrite existing file(s): {', '.join(str(p) for p in conflicts)}"
        )

    if request.total_nodes > len(node_pool):
        logger.warning(
            "Node count override (%d) exceeds the %d node(s) in the pool",
            request.total_nodes, len(node_pool)
        )

    assignment = assign_nodes_to_runs(plan, request.num_runs, request.cores_per_node, request.total_nodes)
    rendered = render_machinefiles(assignment, node_pool)
    write_machinefiles(rendered, paths)

    return {paths[run_index - 1]: lines for run_index, lines in rendered.items()}


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--cores-per-run', '-c', type=click.IntRange(min=1), required=True,
              help='Number of cores required by every run')
@click.option('--cores-per-node', '-n', type=click.IntRange(min=1), required=True,
              help='Number of cores offered by every node')
@click.option('--num-runs', '-r', type=click.IntRange(min=1), required=True,
              help='Number of runs to split the nodes between')
@click.option('--total-nodes', '-t', type=click.IntRange(min=1), default=None,
              help='Number of usable nodes [default: number of nodes in the pool]')
@click.option('--nodefile', '-f', type=click.Path(dir_okay=False), envvar='PBS_NODEFILE',
              help='File listing the allocated nodes, one per line [env: PBS_NODEFILE]')
@click.option('--nodelist', envvar='SLURM_JOB_NODELIST',
              help='Compressed hostlist of the allocated nodes, used when no nodefile '
                   'is given [env: SLURM_JOB_NODELIST]')
@click.option('--output-template', '-o', default=DEFAULT_OUTPUT_TEMPLATE, show_default=True,
              help="Output file name; '{index}' is replaced by the run number")
@click.option('--check-fit', is_flag=True,
              help='Abort if the runs need more cores than the nodes offer')
@click.option('--check-fill', is_flag=True,
              help='Abort unless the runs use exactly the cores the nodes offer')
@click.option('--no-clobber', is_flag=True,
              help='Abort if any output file already exists')
@click.option('--dry-run', is_flag=True,
              help='Print what would be allocated without writing any file')
@click.option('--verbose', '-v', count=True,
              help='Log progress to stderr; repeat for debug output')
def main(
    cores_per_run: int,
    cores_per_node: int,
    num_runs: int,
    total_nodes: Optional[int],
    nodefile: Optional[str],
    nodelist: Optional[str],
    output_template: str,
    check_fit: bool,
    check_fill: bool,
    no_clobber: bool,
    dry_run: bool,
    verbose: int
) -> None:
    """Split allocated nodes into one machinefile per run.

    Every line of a machinefile reads NODE:CORES. Runs receive whole nodes
    first, then their share of the nodes holding the leftover cores.
    """
    logging.basicConfig(format='%(levelname)s: %(message)s', stream=sys.stderr)
    logging.getLogger().setLevel(log_level(verbose))

    if dry_run and total_nodes is not None and not (nodefile or nodelist):
        node_pool = None
    else:
        node_pool = load_node_pool(nodefile, nodelist)

    process_request(
        node_pool, cores_per_run, cores_per_node, num_runs, total_nodes,
        output_template, check_fit, check_fill, no_clobber, dry_run
    )


if __name__ == "__main__":
    main()
