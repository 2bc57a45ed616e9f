"""I/O and data management for simulation results."""

from tline_fdtd.io.hdf5 import (
    HDF5ResultReader,
    HDF5ResultWriter,
    SaveSettings,
    SaveType,
)

__all__ = [
    "HDF5ResultWriter",
    "HDF5ResultReader",
    "SaveSettings",
    "SaveType",
]
