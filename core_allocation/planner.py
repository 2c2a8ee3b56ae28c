"""Allocation planning.

This module derives, from the per-run and per-node core counts, how many whole
nodes each run receives and how the leftover cores of consecutive runs are
packed onto shared nodes.
"""

from dataclasses import dataclass
from math import gcd
from typing import List, Optional, Tuple

from .errors import ConfigurationError


@dataclass(frozen=True)
class RunRequest:
    """Inputs of a single allocation.

    Attributes:
        cores_per_run: Cores required by every run
        cores_per_node: Cores offered by every node of the pool
        num_runs: Number of runs to allocate
        total_nodes: Number of pool nodes that may be used
    """

    cores_per_run: int
    cores_per_node: int
    num_runs: int
    total_nodes: int

    def __post_init__(self) -> None:
        for name in ("cores_per_run", "cores_per_node", "num_runs", "total_nodes"):
            value = getattr(self, name)
            if value is None or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

    @classmethod
    def for_pool(
        cls,
        node_pool: List[str],
        cores_per_run: int,
        cores_per_node: int,
        num_runs: int,
        total_nodes: Optional[int] = None,
    ) -> "RunRequest":
        """Build a request whose node count defaults to the size of the pool."""
        if total_nodes is None:
            total_nodes = len(node_pool)
        return cls(cores_per_run, cores_per_node, num_runs, total_nodes)

    @property
    def total_cores_requested(self) -> int:
        return self.cores_per_run * self.num_runs

    @property
    def total_cores_available(self) -> int:
        return self.total_nodes * self.cores_per_node


@dataclass(frozen=True)
class FractionPlan:
    """Per-run node geometry.

    ``runs_per_batch`` consecutive runs share ``nodes_per_batch`` nodes for
    their leftover cores; every other node a run touches is used in full.
    """

    full_nodes_per_run: int
    leftover_cores: int
    nodes_per_batch: int
    runs_per_batch: int

    @property
    def cores_per_shared_node(self) -> int:
        if self.nodes_per_batch == 0:
            return 0
        return self.leftover_cores // self.nodes_per_batch


def reduce_fraction(leftover_cores: int, cores_per_node: int) -> Tuple[int, int]:
    """Reduce ``leftover_cores / cores_per_node`` to lowest terms.

    Args:
        leftover_cores: Cores a run needs beyond its whole nodes, 0 <= L < C
        cores_per_node: Cores per node, C > 0

    Returns:
        tuple: (nodes_per_batch, runs_per_batch), coprime, with
        ``leftover_cores * runs_per_batch == cores_per_node * nodes_per_batch``.
        No leftover gives (0, 1).
    """
    if cores_per_node <= 0:
        raise ValueError(f"cores_per_node must be positive, got {cores_per_node}")
    if not 0 <= leftover_cores < cores_per_node:
        raise ValueError(
            f"leftover_cores must be in [0, {cores_per_node}), got {leftover_cores}"
        )
    if leftover_cores == 0:
        return 0, 1

    divisor = gcd(leftover_cores, cores_per_node)
    return leftover_cores // divisor, cores_per_node // divisor


def plan_allocation(cores_per_run: int, cores_per_node: int) -> FractionPlan:
    """Compute the full-node count and leftover batch geometry of a run."""
    if cores_per_node <= 0:
        raise ConfigurationError(f"cores_per_node must be a positive integer, got {cores_per_node}")
    if cores_per_run <= 0:
        raise ConfigurationError(f"cores_per_run must be a positive integer, got {cores_per_run}")

    full_nodes, leftover = divmod(cores_per_run, cores_per_node)
    nodes_per_batch, runs_per_batch = reduce_fraction(leftover, cores_per_node)
    return FractionPlan(
        full_nodes_per_run=full_nodes,
        leftover_cores=leftover,
        nodes_per_batch=nodes_per_batch,
        runs_per_batch=runs_per_batch,
    )
