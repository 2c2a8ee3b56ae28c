import os
import stat

import pytest

from core_allocation.errors import AllocationError, AllocationExhausted
from core_allocation.writers import render_machinefiles, write_machinefile, write_machinefiles


def test_render_machinefiles():
    assignment = {1: [(1, 4), (3, 2)], 2: [(2, 4), (3, 2)]}
    rendered = render_machinefiles(assignment, ["a", "b", "c"])
    assert rendered == {1: ["a:4", "c:2"], 2: ["b:4", "c:2"]}


def test_render_past_end_of_pool():
    with pytest.raises(AllocationExhausted) as excinfo:
        render_machinefiles({1: [(1, 4)], 2: [(4, 4)]}, ["a", "b", "c"])
    assert excinfo.value.run_index == 2
    assert excinfo.value.node_index == 4


def test_write_machinefile_replaces_content(tmp_path):
    output_file = tmp_path / "machinefile_1"
    output_file.write_text("stale\nstale\nstale\n")

    write_machinefile(output_file, ["a:4", "b:2"])

    assert output_file.read_text() == "a:4\nb:2\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["machinefile_1"]


def test_write_machinefiles_reports_unwritable_target(tmp_path):
    paths = [tmp_path / "missing-dir" / "machinefile_1"]
    with pytest.raises(AllocationError, match="Cannot write"):
        write_machinefiles({1: ["a:4"]}, paths)


def test_write_machinefile_keeps_existing_mode(tmp_path):
    output_file = tmp_path / "machinefile_1"
    output_file.write_text("stale\n")
    output_file.chmod(0o600)

    write_machinefile(output_file, ["a:4"])

    assert stat.S_IMODE(output_file.stat().st_mode) == 0o600


def test_write_machinefile_honours_umask(tmp_path):
    output_file = tmp_path / "machinefile_1"
    old_umask = os.umask(0o027)
    try:
        write_machinefile(output_file, ["a:4"])
    finally:
        os.umask(old_umask)

    assert stat.S_IMODE(output_file.stat().st_mode) == 0o640


def test_write_machinefile_writes_through_symlink(tmp_path):
    real_file = tmp_path / "real"
    real_file.write_text("stale\n")
    link = tmp_path / "machinefile_1"
    link.symlink_to(real_file)

    write_machinefile(link, ["a:4"])

    assert link.is_symlink()
    assert real_file.read_text() == "a:4\n"
