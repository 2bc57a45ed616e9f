"""1D Finite-Difference Time-Domain (FDTD) transmission line solver.

Leapfrog scheme on a staggered grid: voltages live on nodes, currents on
the branches between them, and each time step advances every voltage
before any current.

Per step, in this order:
    1. voltages[0]       from the source
    2. voltages[1..N]    from the line, using the previous currents
    3. voltages[N+1]     from the terminator
    4. currents[0..N-1]  from the line, using the voltages just computed
    5. currents[N]       from the terminator, using the voltages just computed

Steps 4-5 must see the new voltage row; reordering breaks the stability of
the scheme. Within steps 2 and 4 cells are independent, so they are
updated as whole numpy slices.

Example:
    >>> from tline_fdtd import FdtdSolver, LinearLine, MatchedTerminator, MatchedVSource
    >>> solver = FdtdSolver(tline=line, source=source, terminator=terminator)
    >>> voltages, currents = solver.compute(state, sim_params, nsteps=100)
    >>> voltages.shape  # 100 cells
    (101, 102)
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
from numpy.typing import DTypeLike, NDArray

from tline_fdtd.boundaries import Terminator, VSource

from .lines import TransmissionLine
from .parameters import SimulationParameters, SimulationState


class FdtdSolver:
    """Single-threaded CPU solver composing a line and its two boundaries.

    Args:
        tline: The simulated transmission line
        source: Boundary circuit driving the first node
        terminator: Boundary circuit loading the last node
    """

    def __init__(
        self,
        tline: TransmissionLine,
        source: VSource,
        terminator: Terminator,
    ):
        self.tline = tline
        self.source = source
        self.terminator = terminator

    @property
    def npoints(self) -> int:
        """Number of cells in the simulated line."""
        return self.tline.npoints

    def compute(
        self,
        state: SimulationState,
        sim_params: SimulationParameters,
        nsteps: int,
        callback: Callable[[int], None] | None = None,
        dtype: DTypeLike | None = None,
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Advance ``state`` by ``nsteps`` time steps.

        Args:
            state: Initial voltages and currents (row 0 of the output)
            sim_params: Simulation step sizes
            nsteps: Number of time steps to compute
            callback: Function called after each step with the step index
                within this call
            dtype: Storage dtype for the trajectory (default: the state's)

        Returns:
            Tuple ``(voltages, currents)`` with shapes ``(nsteps+1, N+2)`` and
            ``(nsteps+1, N+1)``. Row k is the state after k steps.
        """
        npoints = self.tline.npoints
        last_ind = npoints + 1
        if dtype is None:
            dtype = state.voltages.dtype

        voltages = np.zeros((nsteps + 1, npoints + 2), dtype=dtype)
        currents = np.zeros((nsteps + 1, npoints + 1), dtype=dtype)
        voltages[0] = state.voltages
        currents[0] = state.currents

        tline = self.tline
        source = self.source
        terminator = self.terminator

        for t_index in range(nsteps):
            t = state.time_at(t_index, sim_params.delta_t)
            last_volts = voltages[t_index]
            last_currs = currents[t_index]
            next_volts = voltages[t_index + 1]
            next_currs = currents[t_index + 1]

            next_volts[0] = source.next_voltage(t, last_volts[0], last_currs[0], sim_params)
            next_volts[1:last_ind] = tline.next_voltage(
                last_volts[1:last_ind],
                last_currs[0:npoints],
                last_currs[1 : npoints + 1],
                sim_params,
            )
            next_volts[last_ind] = terminator.next_voltage(
                last_volts[last_ind], last_currs[npoints], sim_params
            )

            next_currs[0:npoints] = tline.next_current(
                last_currs[0:npoints],
                next_volts[0:npoints],
                next_volts[1:last_ind],
                sim_params,
            )
            next_currs[npoints] = terminator.next_current(
                next_volts[npoints], next_volts[last_ind], last_currs[npoints], sim_params
            )

            if callback:
                callback(t_index)

        return voltages, currents

    def __repr__(self) -> str:
        return (
            f"FdtdSolver(tline={self.tline!r}, source={type(self.source).__name__}, "
            f"terminator={type(self.terminator).__name__})"
        )
