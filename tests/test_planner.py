from math import gcd

import pytest

from core_allocation.errors import ConfigurationError
from core_allocation.planner import FractionPlan, RunRequest, plan_allocation, reduce_fraction


def test_reduce_fraction_without_leftover():
    assert reduce_fraction(0, 4) == (0, 1)
    assert reduce_fraction(0, 1) == (0, 1)


@pytest.mark.parametrize("cores_per_node", [1, 2, 3, 4, 6, 12, 16, 28, 48, 64])
def test_reduce_fraction_is_exact_and_coprime(cores_per_node):
    for leftover in range(1, cores_per_node):
        nodes_per_batch, runs_per_batch = reduce_fraction(leftover, cores_per_node)
        assert leftover * runs_per_batch == cores_per_node * nodes_per_batch
        assert gcd(nodes_per_batch, runs_per_batch) == 1
        assert 0 < nodes_per_batch < runs_per_batch


@pytest.mark.parametrize("leftover, cores_per_node", [(-1, 4), (4, 4), (5, 4), (0, 0), (1, -2)])
def test_reduce_fraction_rejects_out_of_range(leftover, cores_per_node):
    with pytest.raises(ValueError):
        reduce_fraction(leftover, cores_per_node)


def test_plan_allocation_example():
    plan = plan_allocation(cores_per_run=10, cores_per_node=4)
    assert plan == FractionPlan(full_nodes_per_run=2, leftover_cores=2, nodes_per_batch=1, runs_per_batch=2)
    assert plan.cores_per_shared_node == 2


def test_plan_allocation_whole_nodes():
    plan = plan_allocation(cores_per_run=8, cores_per_node=4)
    assert plan.full_nodes_per_run == 2
    assert plan.leftover_cores == 0
    assert (plan.nodes_per_batch, plan.runs_per_batch) == (0, 1)
    assert plan.cores_per_shared_node == 0


def test_plan_allocation_smaller_than_a_node():
    plan = plan_allocation(cores_per_run=6, cores_per_node=16)
    assert plan.full_nodes_per_run == 0
    assert (plan.nodes_per_batch, plan.runs_per_batch) == (3, 8)
    assert plan.cores_per_shared_node == 2


@pytest.mark.parametrize("cores_per_run, cores_per_node", [(0, 4), (4, 0), (-3, 4)])
def test_plan_allocation_rejects_non_positive(cores_per_run, cores_per_node):
    with pytest.raises(ConfigurationError):
        plan_allocation(cores_per_run, cores_per_node)


def test_run_request_defaults_to_pool_size():
    request = RunRequest.for_pool(["a", "b", "c"], cores_per_run=2, cores_per_node=4, num_runs=5)
    assert request.total_nodes == 3
    assert request.total_cores_requested == 10
    assert request.total_cores_available == 12


def test_run_request_override():
    request = RunRequest.for_pool(["a", "b", "c"], 2, 4, 5, total_nodes=2)
    assert request.total_nodes == 2


def test_run_request_rejects_empty_pool():
    with pytest.raises(ConfigurationError, match="total_nodes"):
        RunRequest.for_pool([], cores_per_run=2, cores_per_node=4, num_runs=1)
