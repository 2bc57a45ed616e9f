"""Shared fixtures for the tline-fdtd test suite."""

import numpy as np
import pytest

from tline_fdtd import (
    FdtdSolver,
    KiLine,
    LinearLine,
    MatchedTerminator,
    MatchedVSource,
    SimulationState,
    SineWave,
    StepWave,
)

# 50 Ω line, phase velocity 5e7 m/s
CAPACITANCE = 400e-12
INDUCTANCE = 1e-6


def matched_solver(tline, waveform):
    """Solver with matched boundaries for the default line constants."""
    return FdtdSolver(
        tline=tline,
        source=MatchedVSource(
            waveform=waveform, inductance=INDUCTANCE, capacitance=CAPACITANCE
        ),
        terminator=MatchedTerminator(inductance=INDUCTANCE, capacitance=CAPACITANCE),
    )


@pytest.fixture
def make_solver():
    """Factory for matched solvers around an arbitrary line and waveform."""
    return matched_solver


@pytest.fixture
def small_line():
    """Short lossless line for fast tests."""
    return LinearLine(length=1.0, npoints=20, capacitance=CAPACITANCE, inductance=INDUCTANCE)


@pytest.fixture
def ki_line():
    """Short kinetic inductance line with half of its inductance kinetic."""
    return KiLine(
        length=1.0,
        npoints=20,
        capacitance=CAPACITANCE,
        inductance=INDUCTANCE / 2,
        kinetic_inductance=INDUCTANCE / 2,
        critical_current=0.2,
    )


@pytest.fixture
def sim_params(small_line):
    return small_line.calculate_simulation_parameters(courant=2.0)


@pytest.fixture
def sine_solver(small_line):
    return matched_solver(small_line, SineWave(frequency=4e8))


@pytest.fixture
def step_solver(small_line):
    return matched_solver(small_line, StepWave(amplitude=1.0))


@pytest.fixture
def zero_state(small_line):
    return SimulationState.zeros(small_line.npoints, dtype=np.float64)
