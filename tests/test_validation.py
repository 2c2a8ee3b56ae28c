import pytest

from core_allocation.errors import ConfigurationError
from core_allocation.planner import RunRequest
from core_allocation.validation import existing_outputs, fills, fits, overwrite_safe


@pytest.mark.parametrize("cores_per_run, num_runs, total_nodes, expect_fits, expect_fills", [
    (10, 4, 10, True, True),
    (10, 4, 11, True, False),
    (10, 4, 9, False, False),
    (1, 1, 1, True, False),
    (4, 1, 1, True, True),
    (5, 1, 1, False, False),
])
def test_fits_and_fills(cores_per_run, num_runs, total_nodes, expect_fits, expect_fills):
    request = RunRequest(cores_per_run, 4, num_runs, total_nodes)
    assert fits(request) is expect_fits
    assert fills(request) is expect_fills


def test_overwrite_safe(tmp_path):
    template = str(tmp_path / "machinefile_{index}")
    assert overwrite_safe(template, 3)

    (tmp_path / "machinefile_2").write_text("n1:4\n")
    assert not overwrite_safe(template, 3)
    assert existing_outputs(template, 3) == [tmp_path / "machinefile_2"]
    assert overwrite_safe(template, 1)


def test_overwrite_check_needs_distinct_names(tmp_path):
    with pytest.raises(ConfigurationError):
        overwrite_safe(str(tmp_path / "machinefile"), 2)
