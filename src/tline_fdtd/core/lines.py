"""
Transmission line models for 1D FDTD simulation.

A line is split into N cells of length ``delta_z = length / npoints``. Each
cell carries its own per-unit-length coefficients, sampled once at the cell
midpoint ``(n + 0.5) * delta_z`` when the line is constructed.

Classes:
    TransmissionLine: Common interface and shared sampling/diagnostics
    LinearLine: RLGC line with a centered semi-implicit update
    KiLine: Superconducting line with current-dependent kinetic inductance

Telegrapher's equations (linear line):
    ∂V/∂z = -L ∂I/∂t - R I
    ∂I/∂z = -C ∂V/∂t - G V

Example:
    >>> from tline_fdtd import LinearLine
    >>> line = LinearLine(
    ...     length=2.0,
    ...     npoints=10_000,
    ...     capacitance=400e-12,
    ...     inductance=1e-6,
    ... )
    >>> sim_params = line.calculate_simulation_parameters(courant=2.0)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .parameters import SimulationParameters

Coefficient = Callable[[float], float] | float

#: Newton steps per cell per time step for the kinetic inductance solve.
DEFAULT_NEWTON_ITERATIONS = 3


def sample_coefficient(
    coefficient: Coefficient, positions: NDArray[np.floating]
) -> NDArray[np.float64]:
    """Evaluate a per-unit-length coefficient at each cell midpoint.

    Args:
        coefficient: Function of position along the line (meters), or a
            constant value for a uniform line
        positions: Cell midpoint positions in meters

    Returns:
        Array of coefficient values, one per cell
    """
    if callable(coefficient):
        return np.array([coefficient(float(z)) for z in positions], dtype=np.float64)
    return np.full(len(positions), coefficient, dtype=np.float64)


def solve_kinetic_cubic(
    last_curr: ArrayLike,
    crit_curr: ArrayLike,
    inductance: ArrayLike,
    delta_v: ArrayLike,
    sim_params: SimulationParameters,
    iterations: int = DEFAULT_NEWTON_ITERATIONS,
) -> NDArray[np.floating]:
    """Next current through a kinetic inductance cell.

    Solves ``I³ + b·I² + c·I + d = 0`` with

        b = I_prev
        c = I_crit² - I_prev²
        d = I_crit²·Δt·ΔV / (Δz·L) - I_crit²·I_prev - I_prev³

    which factors as ``(I - I_prev)(I_crit² + (I + I_prev)²) = -I_crit²·Δt·ΔV/(Δz·L)``.

    A fixed number of Newton steps is taken starting from ``I_prev``. There
    is no convergence check: large steps or currents close to ``I_crit`` may
    return an unconverged value, and NaN/Inf propagate.

    Args:
        last_curr: Current at the previous time step
        crit_curr: Effective critical current of the cell
        inductance: Total (geometric + kinetic) inductance per unit length
        delta_v: Voltage difference ``V[n+1] - V[n]`` across the cell
        sim_params: Simulation step sizes
        iterations: Number of Newton steps

    Returns:
        Current at the next time step (array or scalar, following the inputs)
    """
    last_curr = np.asarray(last_curr, dtype=np.float64)
    i_crit2 = np.square(crit_curr)

    b = last_curr
    c = i_crit2 - last_curr**2
    d = (
        i_crit2 * sim_params.delta_t * delta_v / (sim_params.delta_z * inductance)
        - i_crit2 * last_curr
        - last_curr**3
    )

    guess = last_curr
    for _ in range(iterations):
        guess = guess - (guess**3 + b * guess**2 + c * guess + d) / (
            3.0 * guess**2 + 2.0 * b * guess + c
        )
    return guess


class TransmissionLine(ABC):
    """Base class for the simulated line.

    Subclasses provide the per-cell voltage and current updates. Both
    updates accept an ``index`` selecting which cells to update: an int for a
    single cell or a slice (default: every cell) for a vectorized update.
    Every other argument is indexed consistently with ``index``.
    """

    def __init__(self, length: float, npoints: int):
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        if npoints < 1:
            raise ValueError(f"npoints must be >= 1, got {npoints}")

        self._length = float(length)
        self._npoints = int(npoints)

    @property
    def length(self) -> float:
        """Physical length of the line in meters."""
        return self._length

    @property
    def npoints(self) -> int:
        """Number of cells along the line."""
        return self._npoints

    @property
    def cell_positions(self) -> NDArray[np.float64]:
        """Cell midpoint positions in meters."""
        delta_z = self._length / self._npoints
        return (np.arange(self._npoints, dtype=np.float64) + 0.5) * delta_z

    @property
    @abstractmethod
    def capacitance(self) -> NDArray[np.float64]:
        """Per-cell capacitance per unit length (F/m)."""

    @property
    @abstractmethod
    def inductance(self) -> NDArray[np.float64]:
        """Per-cell small-signal inductance per unit length (H/m)."""

    @abstractmethod
    def next_voltage(
        self,
        last_volt: ArrayLike,
        left_curr: ArrayLike,
        right_curr: ArrayLike,
        sim_params: SimulationParameters,
        index: int | slice = slice(None),
    ) -> NDArray[np.floating]:
        """Voltage at the next time step.

        Args:
            last_volt: Voltage at the node at the previous time step
            left_curr: Current flowing into the node
            right_curr: Current flowing out of the node
            sim_params: Simulation step sizes
            index: Cell(s) the node(s) belong to
        """

    @abstractmethod
    def next_current(
        self,
        last_curr: ArrayLike,
        left_volt: ArrayLike,
        right_volt: ArrayLike,
        sim_params: SimulationParameters,
        index: int | slice = slice(None),
    ) -> NDArray[np.floating]:
        """Current at the next time step.

        Args:
            last_curr: Current at the previous time step
            left_volt: Already-updated voltage on the source side
            right_volt: Already-updated voltage on the terminator side
            sim_params: Simulation step sizes
            index: Cell(s) the branch(es) belong to
        """

    def max_phase_velocity(self) -> float:
        """Fastest phase velocity ``1/sqrt(L*C)`` over all cells (m/s)."""
        velocities = 1.0 / np.sqrt(self.inductance * self.capacitance)
        return float(velocities[np.argmax(velocities)])

    def calculate_simulation_parameters(self, courant: float) -> SimulationParameters:
        """Derive step sizes from the cell size and a Courant factor.

        Args:
            courant: Ratio of the numerical grid speed ``delta_z/delta_t`` to
                the fastest phase velocity. Values >= 1 are stable.
        """
        delta_z = self._length / self._npoints
        delta_t = delta_z / (courant * self.max_phase_velocity())
        return SimulationParameters(delta_z=delta_z, delta_t=delta_t)

    def energy(
        self,
        voltages: NDArray[np.floating],
        currents: NDArray[np.floating],
        sim_params: SimulationParameters,
    ) -> float:
        """Stored electromagnetic energy in the line cells (J).

        Energy = (1/2) Σ (C V² + L I²) Δz over the interior nodes. Boundary
        nodes are excluded since they belong to the source and terminator.
        """
        n = self._npoints
        v = np.asarray(voltages[1 : n + 1], dtype=np.float64)
        i = np.asarray(currents[:n], dtype=np.float64)
        e_cap = 0.5 * np.sum(self.capacitance * v**2)
        e_ind = 0.5 * np.sum(self.inductance * i**2)
        return float((e_cap + e_ind) * sim_params.delta_z)


class LinearLine(TransmissionLine):
    """Linear RLGC transmission line.

    Uses the centered (semi-implicit) update for the loss terms, which is
    exact linear algebra per step with no iteration.

    Args:
        length: Line length in meters
        npoints: Number of cells
        capacitance: Capacitance per unit length (F/m), constant or f(z)
        inductance: Inductance per unit length (H/m), constant or f(z)
        resistance: Series resistance per unit length (Ω/m), constant or f(z)
        conductance: Shunt conductance per unit length (S/m), constant or f(z)
    """

    def __init__(
        self,
        length: float,
        npoints: int,
        capacitance: Coefficient,
        inductance: Coefficient,
        resistance: Coefficient = 0.0,
        conductance: Coefficient = 0.0,
    ):
        super().__init__(length, npoints)
        positions = self.cell_positions
        self._cap = sample_coefficient(capacitance, positions)
        self._ind = sample_coefficient(inductance, positions)
        self._res = sample_coefficient(resistance, positions)
        self._cond = sample_coefficient(conductance, positions)

    @property
    def capacitance(self) -> NDArray[np.float64]:
        return self._cap

    @property
    def inductance(self) -> NDArray[np.float64]:
        return self._ind

    @property
    def resistance(self) -> NDArray[np.float64]:
        return self._res

    @property
    def conductance(self) -> NDArray[np.float64]:
        return self._cond

    def next_voltage(self, last_volt, left_curr, right_curr, sim_params, index=slice(None)):
        d_ratio = sim_params.d_ratio
        cap = d_ratio * self._cap[index]
        loss = sim_params.delta_z * self._cond[index] / 2.0

        return ((cap - loss) * last_volt + (left_curr - right_curr)) / (cap + loss)

    def next_current(self, last_curr, left_volt, right_volt, sim_params, index=slice(None)):
        d_ratio = sim_params.d_ratio
        ind = d_ratio * self._ind[index]
        loss = sim_params.delta_z * self._res[index] / 2.0

        return ((ind - loss) * last_curr + (left_volt - right_volt)) / (ind + loss)

    def __repr__(self) -> str:
        return f"LinearLine(length={self._length}, npoints={self._npoints})"


class KiLine(TransmissionLine):
    """Lossless superconducting line with kinetic inductance.

    The kinetic inductance grows with current,
    ``L(I) ≈ L0 (1 + I²/I*²)``, where ``I*`` is the critical current
    rescaled by ``sqrt(L0 / L_k)`` so that only the kinetic fraction of the
    total inductance is nonlinear.

    Args:
        length: Line length in meters
        npoints: Number of cells
        capacitance: Capacitance per unit length (F/m), constant or f(z)
        inductance: Geometric inductance per unit length (H/m), constant or f(z)
        kinetic_inductance: Kinetic inductance per unit length (H/m),
            constant or f(z). Must be positive in every cell.
        critical_current: Critical current (A), constant or f(z)
        newton_iterations: Newton steps per cell per time step. The default
            of 3 reproduces reference outputs.
    """

    def __init__(
        self,
        length: float,
        npoints: int,
        capacitance: Coefficient,
        inductance: Coefficient,
        kinetic_inductance: Coefficient,
        critical_current: Coefficient,
        newton_iterations: int = DEFAULT_NEWTON_ITERATIONS,
    ):
        super().__init__(length, npoints)
        if newton_iterations < 1:
            raise ValueError(f"newton_iterations must be >= 1, got {newton_iterations}")

        positions = self.cell_positions
        geometric = sample_coefficient(inductance, positions)
        kinetic = sample_coefficient(kinetic_inductance, positions)
        if np.any(kinetic <= 0):
            raise ValueError("kinetic_inductance must be positive in every cell")
        crit = sample_coefficient(critical_current, positions)

        self._cap = sample_coefficient(capacitance, positions)
        self._ind0 = geometric + kinetic
        self._crit_cur = crit * np.sqrt(self._ind0 / kinetic)
        self.newton_iterations = int(newton_iterations)

    @property
    def capacitance(self) -> NDArray[np.float64]:
        return self._cap

    @property
    def inductance(self) -> NDArray[np.float64]:
        """Total zero-current inductance (geometric + kinetic) per cell."""
        return self._ind0

    @property
    def critical_current(self) -> NDArray[np.float64]:
        """Effective (rescaled) critical current per cell."""
        return self._crit_cur

    def next_voltage(self, last_volt, left_curr, right_curr, sim_params, index=slice(None)):
        cap = sim_params.d_ratio * self._cap[index]

        return (cap * last_volt + (left_curr - right_curr)) / cap

    def next_current(self, last_curr, left_volt, right_volt, sim_params, index=slice(None)):
        return solve_kinetic_cubic(
            last_curr,
            self._crit_cur[index],
            self._ind0[index],
            np.subtract(right_volt, left_volt, dtype=np.float64),
            sim_params,
            iterations=self.newton_iterations,
        )

    def __repr__(self) -> str:
        return (
            f"KiLine(length={self._length}, npoints={self._npoints}, "
            f"newton_iterations={self.newton_iterations})"
        )
