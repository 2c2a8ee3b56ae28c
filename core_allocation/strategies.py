"""Node assignment strategy.

This module walks the node pool from left to right and hands every run its
whole nodes plus a share of the batch's shared nodes.
"""

import logging
from typing import Dict, List, Tuple

from .errors import AllocationExhausted
from .planner import FractionPlan

logger = logging.getLogger(__name__)

# (node index, core count); node indices are 1-based positions in the pool
NodeShare = Tuple[int, int]
Assignment = Dict[int, List[NodeShare]]


class NodeCursor:
    """Next unconsumed 1-based position in the node pool.

    The cursor only ever moves forward. ``claim`` hands out a block of
    consecutive positions at an offset from the cursor without moving it.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.position = 1

    def claim(self, run_index: int, start: int, count: int) -> List[int]:
        """Return ``count`` consecutive node positions beginning at ``start``."""
        last = start + count - 1
        if count > 0 and last > self.limit:
            raise AllocationExhausted(run_index, max(start, self.limit + 1), self.limit)
        return list(range(start, last + 1))

    def advance(self, count: int) -> None:
        self.position += count


def _assign_full_nodes(
    cursor: NodeCursor,
    run_index: int,
    plan: FractionPlan,
    cores_per_node: int
) -> List[NodeShare]:
    nodes = cursor.claim(run_index, cursor.position, plan.full_nodes_per_run)
    cursor.advance(plan.full_nodes_per_run)
    return [(node, cores_per_node) for node in nodes]


def _assign_shared_nodes(
    cursor: NodeCursor,
    run_index: int,
    plan: FractionPlan
) -> List[NodeShare]:
    """Give a run its share of the shared block of its batch.

    The shared block of a batch sits right after the whole-node blocks of all
    runs of the batch, so earlier runs look ahead past the blocks their
    successors are yet to claim. Only the last run of the batch consumes it.
    """
    runs_per_batch = plan.runs_per_batch
    position_in_batch = run_index % runs_per_batch
    runs_to_come = (runs_per_batch - position_in_batch) % runs_per_batch
    shared_start = cursor.position + plan.full_nodes_per_run * runs_to_come

    nodes = cursor.claim(run_index, shared_start, plan.nodes_per_batch)
    if position_in_batch == 0:
        cursor.advance(plan.nodes_per_batch)
    return [(node, plan.cores_per_shared_node) for node in nodes]


def assign_nodes_to_runs(
    plan: FractionPlan,
    num_runs: int,
    cores_per_node: int,
    total_nodes: int
) -> Assignment:
    """Assign node positions and core counts to every run.

    Runs are processed in order 1..num_runs. Each run first takes
    ``plan.full_nodes_per_run`` whole nodes at the cursor, then, when the plan
    has leftover cores, ``plan.nodes_per_batch`` shared nodes each carrying
    ``plan.cores_per_shared_node`` cores.

    If num_runs is not a multiple of ``plan.runs_per_batch``, the trailing
    runs still place their shared block after the whole-node blocks of the
    whole batch. Nodes reserved for the missing runs stay unreferenced and the
    shared block is only partly used.

    Args:
        plan: Geometry from ``plan_allocation``
        num_runs: Number of runs to allocate
        cores_per_node: Cores offered by every node
        total_nodes: Number of pool positions that may be referenced

    Returns:
        dict: run index -> ordered list of (node index, core count)

    Raises:
        AllocationExhausted: if any run would need a node past ``total_nodes``
    """
    cursor = NodeCursor(total_nodes)
    assignment: Assignment = {}

    for run_index in range(1, num_runs + 1):
        shares = _assign_full_nodes(cursor, run_index, plan, cores_per_node)
        if plan.nodes_per_batch:
            shares.extend(_assign_shared_nodes(cursor, run_index, plan))
        assignment[run_index] = shares

    if num_runs % plan.runs_per_batch:
        logger.info(
            "Last batch is incomplete: %d of %d runs share its leftover nodes",
            num_runs % plan.runs_per_batch, plan.runs_per_batch
        )
    logger.debug("Assigned %d run(s), cursor stopped at node %d", num_runs, cursor.position)
    return assignment


def node_usage(assignment: Assignment) -> Dict[int, int]:
    """Sum the cores taken from every referenced node position."""
    usage: Dict[int, int] = {}
    for shares in assignment.values():
        for node, cores in shares:
            usage[node] = usage.get(node, 0) + cores
    return usage
