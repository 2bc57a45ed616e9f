"""
Simulation parameters and state for 1D transmission line FDTD.

Grid layout (staggered in space and time):
    - voltages[0]       source node
    - voltages[1..N]    interior nodes, one per cell
    - voltages[N+1]     terminator node
    - currents[0..N-1]  between voltages[n] and voltages[n+1]
    - currents[N]       terminator branch

For a line of N cells a state therefore holds N+2 voltages and N+1 currents.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import DTypeLike, NDArray


@dataclass(frozen=True)
class SimulationParameters:
    """Spatial and temporal step shared by all update kernels.

    Args:
        delta_z: Physical length of each cell in meters
        delta_t: Length of each time step in seconds

    Note:
        Stability requires ``delta_t <= delta_z / max_phase_velocity``.
        This is not enforced here; use
        ``TransmissionLine.calculate_simulation_parameters`` to derive a
        stable time step from a Courant factor.
    """

    delta_z: float
    delta_t: float

    def __post_init__(self):
        if not self.delta_z > 0:
            raise ValueError(f"delta_z must be positive, got {self.delta_z}")
        if not self.delta_t > 0:
            raise ValueError(f"delta_t must be positive, got {self.delta_t}")

    @property
    def d_ratio(self) -> float:
        """Ratio delta_z / delta_t that weights every update equation."""
        return self.delta_z / self.delta_t


@dataclass(frozen=True, eq=False)
class SimulationState:
    """Voltages and currents along the line at a single time.

    Args:
        time: Simulation time of this state in seconds
        voltages: Node voltages, length N+2
        currents: Branch currents, length N+1

    Source times are evaluated as ``start_time + (step + k) * delta_t`` so
    that splitting a run into batches reproduces the unsplit run exactly.
    States are immutable; ``advance`` returns the next one, so ``time`` always
    agrees with the clock used for the source.
    """

    time: float
    voltages: NDArray[np.floating]
    currents: NDArray[np.floating]

    start_time: float = field(init=False, repr=False)
    step: int = field(default=0, init=False)

    def __post_init__(self):
        object.__setattr__(self, "voltages", np.asarray(self.voltages))
        object.__setattr__(self, "currents", np.asarray(self.currents))
        object.__setattr__(self, "start_time", self.time)

    @classmethod
    def zeros(
        cls, npoints: int, dtype: DTypeLike = np.float32, time: float = 0.0
    ) -> SimulationState:
        """Create a quiescent state for a line with ``npoints`` cells."""
        return cls(
            time=time,
            voltages=np.zeros(npoints + 2, dtype=dtype),
            currents=np.zeros(npoints + 1, dtype=dtype),
        )

    def time_at(self, offset: int, delta_t: float) -> float:
        """Time ``offset`` steps after this state."""
        return self.start_time + (self.step + offset) * delta_t

    def advance(
        self,
        voltages: NDArray[np.floating],
        currents: NDArray[np.floating],
        nsteps: int,
        delta_t: float,
    ) -> SimulationState:
        """Return the state reached after ``nsteps`` further steps.

        The arrays are copied so the new state does not keep a batch
        trajectory alive.
        """
        new = SimulationState(
            time=self.time_at(nsteps, delta_t),
            voltages=np.array(voltages, copy=True),
            currents=np.array(currents, copy=True),
        )
        object.__setattr__(new, "start_time", self.start_time)
        object.__setattr__(new, "step", self.step + nsteps)
        return new
