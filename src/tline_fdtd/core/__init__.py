"""Core FDTD solver components."""

from tline_fdtd.core.lines import KiLine, LinearLine, TransmissionLine, solve_kinetic_cubic
from tline_fdtd.core.parameters import SimulationParameters, SimulationState
from tline_fdtd.core.simulation import InitLengthError, Simulation
from tline_fdtd.core.solver import FdtdSolver
from tline_fdtd.core.waveforms import GaussianPulse, SampledWaveform, SineWave, StepWave

__all__ = [
    "SimulationParameters",
    "SimulationState",
    "TransmissionLine",
    "LinearLine",
    "KiLine",
    "solve_kinetic_cubic",
    "FdtdSolver",
    "Simulation",
    "InitLengthError",
    "SineWave",
    "StepWave",
    "GaussianPulse",
    "SampledWaveform",
]
