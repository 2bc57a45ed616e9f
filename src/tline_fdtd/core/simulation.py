"""Simulation driver for long transmission line runs.

The driver owns the current SimulationState and advances it in batches.
Each batch is computed by the solver as a dense trajectory, optionally saved
to HDF5, and then collapsed to its last row, which becomes the new state.
The batch size is chosen so a batch covers about ``max_batch_elements``
values per array, independent of the run length. Rows are counted as N+1
values and each batch carries one extra row for its initial state, so the
arrays can exceed the bound by roughly one row plus one value per row.

Example:
    >>> from tline_fdtd import Simulation, SaveSettings, SaveType
    >>> simulation = Simulation(solver=solver, sim_params=sim_params)
    >>> # reach steady state, keeping only the end points
    >>> simulation.run(1e-7, save_settings=SaveSettings(
    ...     "data/tline.h5", save_type=SaveType.END, overwrite=True))
    >>> # continue into the same file with the full trajectory
    >>> simulation.run(1e-7, save_settings=SaveSettings(
    ...     "data/tline.h5", save_type=SaveType.FULL, overwrite=False))
"""

from __future__ import annotations

import warnings
from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import DTypeLike

from .parameters import SimulationParameters, SimulationState
from .solver import FdtdSolver

if TYPE_CHECKING:
    from tline_fdtd.io.hdf5 import SaveSettings

#: Upper bound on values held by one batch trajectory array.
DEFAULT_MAX_BATCH_ELEMENTS = 100_000_000


class InitLengthError(ValueError):
    """Raised when an initial state does not match the line geometry."""

    def __init__(self, array_name: str, input_length: int, expected_length: int):
        self.array_name = array_name
        self.input_length = input_length
        self.expected_length = expected_length
        super().__init__(
            f"Init {array_name} array does not have expected length "
            f"({array_name} array length: {input_length}, "
            f"expected length: {expected_length})"
        )


class Simulation:
    """Runs an FdtdSolver over arbitrarily long time spans.

    Args:
        solver: The solver for the simulated circuit
        sim_params: Simulation step sizes
        init_state: State to start from (default: all zeros at time 0)
        max_batch_elements: Approximate memory bound for one batch, in array
            elements
        dtype: Storage dtype for states and trajectories (default: the
            initial state's dtype, or float32)

    Raises:
        InitLengthError: If ``init_state`` has ``len(voltages) != N+2`` or
            ``len(currents) != N+1``
    """

    def __init__(
        self,
        solver: FdtdSolver,
        sim_params: SimulationParameters,
        init_state: SimulationState | None = None,
        max_batch_elements: int = DEFAULT_MAX_BATCH_ELEMENTS,
        dtype: DTypeLike | None = None,
    ):
        if max_batch_elements < 1:
            raise ValueError(f"max_batch_elements must be >= 1, got {max_batch_elements}")

        self.solver = solver
        self.sim_params = sim_params
        self.max_batch_elements = int(max_batch_elements)
        if dtype is None:
            dtype = init_state.voltages.dtype if init_state is not None else np.float32
        self.dtype = np.dtype(dtype)

        total_points = 1 + solver.npoints
        state = init_state if init_state is not None else self._zero_state()
        if len(state.voltages) != total_points + 1:
            raise InitLengthError("Voltage", len(state.voltages), total_points + 1)
        if len(state.currents) != total_points:
            raise InitLengthError("Current", len(state.currents), total_points)
        self.state = state

        max_velocity = solver.tline.max_phase_velocity()
        courant = sim_params.d_ratio / max_velocity
        if courant < 1.0:
            warnings.warn(
                f"Courant factor {courant:.3f} is below 1 "
                f"(delta_t={sim_params.delta_t:.3e} s, "
                f"stable limit={sim_params.delta_z / max_velocity:.3e} s). "
                "The simulation is likely to diverge.",
                UserWarning,
                stacklevel=2,
            )

    def _zero_state(self) -> SimulationState:
        return SimulationState.zeros(self.solver.npoints, dtype=self.dtype)

    @property
    def npoints(self) -> int:
        """Number of cells in the simulated line."""
        return self.solver.npoints

    @property
    def time(self) -> float:
        """Current simulation time in seconds."""
        return self.state.time

    def batch_size(self, nsteps: int) -> int:
        """Rows per batch trajectory (``store_size``) for a run of ``nsteps``.

        Each batch covers at most ``batch_size - 1`` steps, and at least one
        step even when a single row exceeds ``max_batch_elements``.
        """
        total_points = 1 + self.solver.npoints
        return min(nsteps + 1, max(self.max_batch_elements // total_points, 1) + 1)

    def run(
        self,
        time_duration: float,
        save_settings: SaveSettings | None = None,
        verbose: bool = False,
        callback: Callable[[int], None] | None = None,
        script_content: str | None = None,
    ) -> None:
        """Advance the simulation by ``time_duration`` seconds.

        The duration is rounded up to a whole number of steps. Zero steps
        leave the state untouched and do not touch the save file.

        Args:
            time_duration: How long, in seconds, the simulation should run
            save_settings: What, if any, information to save to file
            verbose: If True, show a progress bar
            callback: Function called after each step with the step index
                within this run
            script_content: Source script stored in newly created files

        Raises:
            OSError, KeyError, ValueError: If preparing or writing the save
                file fails. The state is left at the last fully saved batch.
        """
        nsteps = int(np.ceil(time_duration / self.sim_params.delta_t))
        if nsteps <= 0:
            return

        store_size = self.batch_size(nsteps)

        writer = None
        if save_settings is not None:
            from tline_fdtd.io import HDF5ResultWriter

            writer = HDF5ResultWriter(
                save_settings,
                self.sim_params,
                self.solver.npoints,
                nsteps,
                script_content=script_content,
            )

        bar = None
        if verbose:
            from tqdm import tqdm

            print(f"# of time steps: {nsteps}")
            bar = tqdm(total=nsteps, desc="FDTD simulation")

        try:
            nloops = (nsteps - 1) // (store_size - 1) + 1
            for i in range(nloops):
                start_index = (store_size - 1) * i
                end_index = min((store_size - 1) * (i + 1), nsteps)
                niters = end_index - start_index

                def step_callback(step: int, _offset: int = start_index) -> None:
                    if bar is not None:
                        bar.update(1)
                    if callback:
                        callback(_offset + step)

                voltages, currents = self.solver.compute(
                    self.state,
                    self.sim_params,
                    niters,
                    callback=step_callback if (bar is not None or callback) else None,
                    dtype=self.dtype,
                )

                if writer is not None:
                    writer.write_batch(voltages, currents, start_index, end_index)

                self.state = self.state.advance(
                    voltages[niters], currents[niters], niters, self.sim_params.delta_t
                )
        finally:
            if bar is not None:
                bar.close()

    def compute_energy(self) -> float:
        """Energy stored in the line cells for the current state (J)."""
        return self.solver.tline.energy(
            self.state.voltages, self.state.currents, self.sim_params
        )

    def reset(self) -> None:
        """Return to a quiescent line at time 0."""
        self.state = self._zero_state()

    def __repr__(self) -> str:
        return (
            f"Simulation(npoints={self.npoints}, delta_z={self.sim_params.delta_z:.3e}, "
            f"delta_t={self.sim_params.delta_t:.3e}, time={self.state.time:.3e})"
        )
