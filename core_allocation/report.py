"""Dry-run summary of an allocation."""

from dataclasses import dataclass
from typing import List

from .planner import FractionPlan, RunRequest
from .validation import fills, fits


@dataclass(frozen=True)
class AllocationSummary:
    total_cores_requested: int
    total_cores_available: int
    fits: bool
    fills: bool
    full_nodes_per_run: int
    leftover_cores: int
    nodes_per_batch: int
    runs_per_batch: int
    cores_per_shared_node: int
    complete_batches: int
    trailing_runs: int
    nodes_reached: int
    idle_cores: int

    @classmethod
    def from_request(cls, request: RunRequest, plan: FractionPlan) -> "AllocationSummary":
        """Derive the summary without assigning any node.

        ``nodes_reached`` is the highest pool position the left-to-right pass
        touches: every batch, complete or not, spans the whole-node blocks of
        all its runs plus its shared block.
        """
        complete_batches, trailing_runs = divmod(request.num_runs, plan.runs_per_batch)
        batches = complete_batches + (1 if trailing_runs else 0)
        nodes_per_batch_span = plan.runs_per_batch * plan.full_nodes_per_run + plan.nodes_per_batch
        nodes_reached = batches * nodes_per_batch_span

        return cls(
            total_cores_requested=request.total_cores_requested,
            total_cores_available=request.total_cores_available,
            fits=fits(request),
            fills=fills(request),
            full_nodes_per_run=plan.full_nodes_per_run,
            leftover_cores=plan.leftover_cores,
            nodes_per_batch=plan.nodes_per_batch,
            runs_per_batch=plan.runs_per_batch,
            cores_per_shared_node=plan.cores_per_shared_node,
            complete_batches=complete_batches,
            trailing_runs=trailing_runs,
            nodes_reached=nodes_reached,
            idle_cores=nodes_reached * request.cores_per_node - request.total_cores_requested,
        )

    def lines(self) -> List[str]:
        lines = [
            f"Total cores requested: {self.total_cores_requested}",
            f"Total cores available: {self.total_cores_available}",
            f"Fits: {'yes' if self.fits else 'no'}",
            f"Fills: {'yes' if self.fills else 'no'}",
            f"Full nodes per run: {self.full_nodes_per_run}",
            f"Leftover cores per run: {self.leftover_cores}",
        ]
        if self.nodes_per_batch:
            lines += [
                f"Shared nodes per batch: {self.nodes_per_batch}",
                f"Runs per batch: {self.runs_per_batch}",
                f"Cores per shared node and run: {self.cores_per_shared_node}",
                f"Complete batches: {self.complete_batches}",
            ]
            if self.trailing_runs:
                lines.append(f"Runs in incomplete last batch: {self.trailing_runs}")
        lines += [
            f"Nodes reached: {self.nodes_reached}",
            f"Idle cores within reach: {self.idle_cores}",
        ]
        return lines
