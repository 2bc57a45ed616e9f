"""
tline-fdtd - 1D transmission line FDTD simulation.

Main exports:
- LinearLine: RLGC transmission line
- KiLine: Nonlinear kinetic inductance line
- MatchedVSource, MatchedTerminator: Boundary circuits
- FdtdSolver: Leapfrog solver composing a line and its boundaries
- Simulation: Memory-bounded driver for long runs
- SaveSettings, SaveType: HDF5 output options
- SineWave, StepWave, GaussianPulse, SampledWaveform: Source waveforms
"""

from tline_fdtd.boundaries import MatchedTerminator, MatchedVSource, Terminator, VSource
from tline_fdtd.core.lines import KiLine, LinearLine, TransmissionLine
from tline_fdtd.core.parameters import SimulationParameters, SimulationState
from tline_fdtd.core.simulation import InitLengthError, Simulation
from tline_fdtd.core.solver import FdtdSolver
from tline_fdtd.core.waveforms import GaussianPulse, SampledWaveform, SineWave, StepWave
from tline_fdtd.io import HDF5ResultReader, HDF5ResultWriter, SaveSettings, SaveType

# Submodules for more specific imports
from . import boundaries, core, io

__version__ = "0.1.0"

__all__ = [
    # Core solver
    "SimulationParameters",
    "SimulationState",
    "TransmissionLine",
    "LinearLine",
    "KiLine",
    "FdtdSolver",
    "Simulation",
    "InitLengthError",
    # Boundaries
    "VSource",
    "Terminator",
    "MatchedVSource",
    "MatchedTerminator",
    # Waveforms
    "SineWave",
    "StepWave",
    "GaussianPulse",
    "SampledWaveform",
    # Output
    "SaveSettings",
    "SaveType",
    "HDF5ResultWriter",
    "HDF5ResultReader",
    # Submodules
    "core",
    "boundaries",
    "io",
]
