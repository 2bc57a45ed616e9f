"""
Boundary conditions for 1D transmission line FDTD.

This module provides the circuits attached to the two ends of the line:
    - MatchedVSource: Thevenin voltage source driving the first node
    - MatchedTerminator: Matched load at the last node

Both ends are modeled as one extra cell of a lossy line with the given
per-unit-length L, C, R, G. The source adds a series impedance
``Z0 = sqrt(L/C)`` between the generator and the first node; the
terminator adds a shunt admittance ``Y0 = sqrt(C/L)``. When L and C match
the line, waves leave the line without reflection.

Example: Driving a line
-----------------------
    source = MatchedVSource(
        waveform=SineWave(frequency=4e8),
        inductance=1e-6,
        capacitance=400e-12,
    )
    terminator = MatchedTerminator(inductance=1e-6, capacitance=400e-12)

Custom boundaries subclass VSource or Terminator and are passed to
FdtdSolver in the same way.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from tline_fdtd.core.parameters import SimulationParameters


class VSource(ABC):
    """Generates the voltage at the start of a transmission line."""

    @abstractmethod
    def next_voltage(
        self,
        t: float,
        last_volt: float,
        last_curr: float,
        sim_params: SimulationParameters,
    ) -> float:
        """Voltage of the first node at the next time step.

        Args:
            t: Simulation time of the previous step in seconds
            last_volt: First node voltage at the previous step
            last_curr: First line current at the previous step
            sim_params: Simulation step sizes
        """

    @abstractmethod
    def generate(self, time: float) -> float:
        """Open-circuit generator voltage at ``time``."""


class Terminator(ABC):
    """Handles the end of line boundary, representing a physical load."""

    @abstractmethod
    def next_voltage(
        self,
        last_volt: float,
        last_curr: float,
        sim_params: SimulationParameters,
    ) -> float:
        """Voltage of the last node at the next time step.

        Args:
            last_volt: Last node voltage at the previous step
            last_curr: Current into the load at the previous step
            sim_params: Simulation step sizes
        """

    @abstractmethod
    def next_current(
        self,
        left_volt: float,
        right_volt: float,
        last_curr: float,
        sim_params: SimulationParameters,
    ) -> float:
        """Current into the load at the next time step.

        Args:
            left_volt: Already-updated voltage of the last interior node
            right_volt: Already-updated voltage of the last node
            last_curr: Current into the load at the previous step
            sim_params: Simulation step sizes
        """


@dataclass(frozen=True)
class MatchedVSource(VSource):
    """Voltage source with a matched internal impedance.

    Args:
        waveform: Generator voltage as a function of time (seconds)
        inductance: Inductance per unit length (H/m)
        capacitance: Capacitance per unit length (F/m)
        resistance: Series resistance per unit length (Ω/m, default: 0)
        conductance: Shunt conductance per unit length (S/m, default: 0)

    Note:
        The source current is a fictitious branch current solved from the
        generator loop each step; only the resulting node voltage is kept.
    """

    waveform: Callable[[float], float]
    inductance: float
    capacitance: float
    resistance: float = 0.0
    conductance: float = 0.0

    def __post_init__(self):
        if self.inductance <= 0:
            raise ValueError("inductance must be positive")
        if self.capacitance <= 0:
            raise ValueError("capacitance must be positive")

    @property
    def impedance(self) -> float:
        """Characteristic impedance sqrt(L/C) of the source (Ω)."""
        return float(np.sqrt(self.inductance / self.capacitance))

    def generate(self, time: float) -> float:
        return self.waveform(time)

    def next_voltage(self, t, last_volt, last_curr, sim_params):
        delta_z = sim_params.delta_z
        d_ratio = sim_params.d_ratio
        total_resistance = delta_z * self.resistance + self.impedance

        ind = d_ratio * self.inductance
        source_curr = (
            (ind - total_resistance / 2.0) * last_curr + (self.generate(t) - last_volt)
        ) / (ind + total_resistance / 2.0)

        cap = d_ratio * self.capacitance
        loss = delta_z * self.conductance / 2.0
        return ((cap - loss) * last_volt + (source_curr - last_curr)) / (cap + loss)


@dataclass(frozen=True)
class MatchedTerminator(Terminator):
    """Matched resistive load at the end of the line.

    Args:
        inductance: Inductance per unit length (H/m)
        capacitance: Capacitance per unit length (F/m)
        resistance: Series resistance per unit length (Ω/m, default: 0)
        conductance: Shunt conductance per unit length (S/m, default: 0)
    """

    inductance: float
    capacitance: float
    resistance: float = 0.0
    conductance: float = 0.0

    def __post_init__(self):
        if self.inductance <= 0:
            raise ValueError("inductance must be positive")
        if self.capacitance <= 0:
            raise ValueError("capacitance must be positive")

    @property
    def admittance(self) -> float:
        """Characteristic admittance sqrt(C/L) of the load (S)."""
        return float(np.sqrt(self.capacitance / self.inductance))

    def next_voltage(self, last_volt, last_curr, sim_params):
        d_ratio = sim_params.d_ratio
        total_conductance = sim_params.delta_z * self.conductance + self.admittance

        cap = d_ratio * self.capacitance
        return ((cap - total_conductance / 2.0) * last_volt + last_curr) / (
            cap + total_conductance / 2.0
        )

    def next_current(self, left_volt, right_volt, last_curr, sim_params):
        ind = sim_params.d_ratio * self.inductance
        loss = sim_params.delta_z * self.resistance / 2.0

        return ((ind - loss) * last_curr + (left_volt - right_volt)) / (ind + loss)
