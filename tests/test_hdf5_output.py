"""Tests for HDF5 output format."""

import h5py
import numpy as np
import pytest

from tline_fdtd import (
    HDF5ResultReader,
    LinearLine,
    SaveSettings,
    SaveType,
    Simulation,
    SineWave,
)
from tline_fdtd.io.hdf5 import HDF5ResultWriter


def duration_for(nsteps, sim_params):
    return (nsteps - 0.5) * sim_params.delta_t


@pytest.fixture
def simulation(sine_solver, sim_params):
    # 21 values per row: 3 steps per batch
    return Simulation(sine_solver, sim_params, max_batch_elements=63)


def test_hdf5_end_file_structure(simulation, sim_params, tmp_path):
    """An END run writes the four boundary series and no full data."""
    output_path = tmp_path / "end.h5"
    simulation.run(
        duration_for(10, sim_params),
        save_settings=SaveSettings(output_path, save_type=SaveType.END, overwrite=True),
    )

    assert output_path.exists()

    with h5py.File(output_path, "r") as f:
        for name in ("start/voltages", "start/currents", "end/voltages", "end/currents"):
            assert f[name].shape == (10,)
            assert f[name].dtype == np.float32
            assert f[name].maxshape == (None,)
        assert "full" not in f

        assert f.attrs["time_step"] == pytest.approx(sim_params.delta_t)
        assert f.attrs["length_step"] == pytest.approx(sim_params.delta_z)
        assert f.attrs["npoints"] == 20
        assert "created_at" in f.attrs
        assert "script_hash" not in f.attrs


def test_hdf5_rows_match_trajectory(sine_solver, simulation, sim_params, tmp_path):
    """Row k holds the values after step k+1, across batch boundaries."""
    output_path = tmp_path / "full.h5"
    initial = simulation.state
    simulation.run(
        duration_for(10, sim_params),
        save_settings=SaveSettings(output_path, save_type=SaveType.FULL, overwrite=True),
    )

    voltages, currents = sine_solver.compute(initial, sim_params, nsteps=10)

    with HDF5ResultReader(output_path) as reader:
        v_start, i_start = reader.load_start()
        v_end, i_end = reader.load_end()
        v_full, i_full = reader.load_full()

    np.testing.assert_array_equal(v_start, voltages[1:, 0])
    np.testing.assert_array_equal(i_start, currents[1:, 0])
    np.testing.assert_array_equal(v_end, voltages[1:, -1])
    np.testing.assert_array_equal(i_end, currents[1:, -1])
    np.testing.assert_array_equal(v_full, voltages[1:])
    np.testing.assert_array_equal(i_full, currents[1:])


def test_hdf5_append_continues_series(sine_solver, sim_params, tmp_path):
    """Appending runs gives the same series as one long run."""
    single_path = tmp_path / "single.h5"
    Simulation(sine_solver, sim_params).run(
        duration_for(12, sim_params),
        save_settings=SaveSettings(single_path, overwrite=True),
    )

    appended_path = tmp_path / "appended.h5"
    simulation = Simulation(sine_solver, sim_params, max_batch_elements=63)
    simulation.run(duration_for(5, sim_params), save_settings=SaveSettings(appended_path, overwrite=True))
    simulation.run(duration_for(7, sim_params), save_settings=SaveSettings(appended_path))

    with HDF5ResultReader(single_path) as single, HDF5ResultReader(appended_path) as appended:
        assert appended.num_rows == 12
        np.testing.assert_array_equal(appended.load_end()[0], single.load_end()[0])
        np.testing.assert_array_equal(appended.load_start()[1], single.load_start()[1])


def test_hdf5_full_group_created_on_append(simulation, sim_params, tmp_path):
    """Full data started on append has its own row count."""
    output_path = tmp_path / "mixed.h5"
    simulation.run(
        duration_for(8, sim_params),
        save_settings=SaveSettings(output_path, save_type=SaveType.END, overwrite=True),
    )
    simulation.run(
        duration_for(4, sim_params),
        save_settings=SaveSettings(output_path, save_type=SaveType.FULL),
    )
    simulation.run(
        duration_for(3, sim_params),
        save_settings=SaveSettings(output_path, save_type=SaveType.FULL),
    )

    with HDF5ResultReader(output_path) as reader:
        assert reader.num_rows == 15
        assert reader.has_full
        voltages, currents = reader.load_full()
        v_end, _ = reader.load_end()

    assert voltages.shape == (7, 22)
    assert currents.shape == (7, 21)
    np.testing.assert_array_equal(voltages[:, -1], v_end[8:])


def test_hdf5_overwrite_replaces_file(simulation, sim_params, tmp_path):
    output_path = tmp_path / "replaced.h5"
    simulation.run(duration_for(9, sim_params), save_settings=SaveSettings(output_path, overwrite=True))
    simulation.run(duration_for(4, sim_params), save_settings=SaveSettings(output_path, overwrite=True))

    with HDF5ResultReader(output_path) as reader:
        assert reader.num_rows == 4


def test_hdf5_creates_parent_directories(simulation, sim_params, tmp_path):
    output_path = tmp_path / "data" / "nested" / "tline.h5"
    simulation.run(duration_for(2, sim_params), save_settings=SaveSettings(output_path))

    assert output_path.exists()


def test_hdf5_script_content_stored(simulation, sim_params, tmp_path):
    output_path = tmp_path / "script.h5"
    script_content = "# Test script"
    simulation.run(
        duration_for(2, sim_params),
        save_settings=SaveSettings(output_path, overwrite=True),
        script_content=script_content,
    )

    with HDF5ResultReader(output_path) as reader:
        metadata = reader.get_metadata()

    assert metadata["script_content"] == script_content
    assert len(metadata["script_hash"]) == 64


def test_hdf5_reader_metadata(simulation, sim_params, tmp_path):
    output_path = tmp_path / "meta.h5"
    simulation.run(duration_for(3, sim_params), save_settings=SaveSettings(output_path))

    with HDF5ResultReader(output_path) as reader:
        metadata = reader.get_metadata()
        assert not reader.has_full
        with pytest.raises(ValueError, match="No full"):
            reader.load_full()

    assert metadata["delta_t"] == pytest.approx(sim_params.delta_t)
    assert metadata["delta_z"] == pytest.approx(sim_params.delta_z)
    assert metadata["npoints"] == 20
    assert metadata["solver_version"] == "0.1.0"


def test_hdf5_append_mismatch_leaves_state(sim_params, make_solver, tmp_path):
    """A failed save leaves the simulation where it was."""
    output_path = tmp_path / "mismatch.h5"

    wide = LinearLine(length=1.0, npoints=20, capacitance=400e-12, inductance=1e-6)
    Simulation(make_solver(wide, SineWave(4e8)), sim_params).run(
        duration_for(3, sim_params),
        save_settings=SaveSettings(output_path, save_type=SaveType.FULL, overwrite=True),
    )

    narrow = LinearLine(length=0.5, npoints=10, capacitance=400e-12, inductance=1e-6)
    simulation = Simulation(make_solver(narrow, SineWave(4e8)), sim_params)
    state = simulation.state

    with pytest.raises(ValueError, match="Cannot append"):
        simulation.run(
            duration_for(3, sim_params),
            save_settings=SaveSettings(output_path, save_type=SaveType.FULL),
        )

    assert simulation.state is state
    assert simulation.time == 0.0


def test_hdf5_writer_without_compression(sim_params, tmp_path):
    output_path = tmp_path / "raw.h5"
    settings = SaveSettings(output_path, save_type=SaveType.FULL, overwrite=True)
    writer = HDF5ResultWriter(settings, sim_params, npoints=4, nsteps=2, compression=None)

    voltages = np.arange(18, dtype=np.float32).reshape(3, 6)
    currents = np.arange(15, dtype=np.float32).reshape(3, 5)
    writer.write_batch(voltages, currents, 0, 2)

    with h5py.File(output_path, "r") as f:
        assert f["full/voltages"].compression is None
        np.testing.assert_array_equal(f["full/voltages"][:], voltages[1:])
        np.testing.assert_array_equal(f["end/currents"][:], currents[1:, -1])
        np.testing.assert_array_equal(f["start/voltages"][:], voltages[1:, 0])
