"""HDF5 output format for transmission line simulation results.

Results are written batch by batch while the simulation runs, so a run of
any length never holds more than one batch in memory.

File structure:
    results.h5
    ├─ attributes: time_step, length_step, npoints, created_at, solver_version
    │              (script_hash, script_content when run from a script)
    ├─ /start/voltages, /start/currents   (rows,)       first node and branch
    ├─ /end/voltages,   /end/currents     (rows,)       last node and branch
    └─ /full/voltages   (rows, N+2)                     SaveType.FULL only
       /full/currents   (rows, N+1)

Row k of every dataset holds the values after the k-th saved time step.
Datasets are resizable: a run with ``overwrite=False`` against an existing
file continues after its last row instead of replacing it.

Example:
    >>> settings = SaveSettings("data/tline.h5", save_type=SaveType.END, overwrite=True)
    >>> simulation.run(1e-7, save_settings=settings)
    >>> with HDF5ResultReader("data/tline.h5") as reader:
    ...     v_end, i_end = reader.load_end()
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import h5py
import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from tline_fdtd.core.parameters import SimulationParameters

BOUNDARY_DATASETS = (
    "start/voltages",
    "start/currents",
    "end/voltages",
    "end/currents",
)


class SaveType(Enum):
    """What data to save."""

    #: Voltage and current at both ends of the line only.
    END = "end"
    #: End data plus voltage and current at every point on the line.
    FULL = "full"


@dataclass(frozen=True)
class SaveSettings:
    """How simulation data should be saved to file.

    Args:
        filename: Path to the HDF5 file
        save_type: What information to save (default: SaveType.END)
        overwrite: Replace an existing file instead of appending to it
            (default: False)
    """

    filename: str | Path
    save_type: SaveType = SaveType.END
    overwrite: bool = False


class HDF5ResultWriter:
    """Batch writer for one simulation run.

    Opening the writer prepares the file for ``nsteps`` new rows: a fresh
    file is created when overwriting or when none exists, otherwise the
    existing datasets are resized and writes are offset past their current
    length. Each call to ``write_batch`` reopens the file, writes the rows
    of one solver batch and closes it again.

    Args:
        settings: Destination and save mode
        sim_params: Simulation step sizes, stored as file attributes
        npoints: Number of cells in the line
        nsteps: Number of rows this run will add
        script_content: Source script for reproducibility (fresh files only)
        compression: Compression algorithm ('gzip', 'lzf', None)
        compression_level: Compression level (0-9 for gzip)
    """

    def __init__(
        self,
        settings: SaveSettings,
        sim_params: SimulationParameters,
        npoints: int,
        nsteps: int,
        script_content: str | None = None,
        compression: str | None = "gzip",
        compression_level: int = 4,
    ):
        self.filename = Path(settings.filename)
        self.save_type = settings.save_type
        self.npoints = npoints
        self.nsteps = nsteps
        self.compression = compression
        self.compression_opts = compression_level if compression == "gzip" else None

        self.end_offset = 0
        self.full_offset = 0

        if self.filename.exists() and not settings.overwrite:
            self._prepare_append()
        else:
            self._create(sim_params, script_content)

    @property
    def save_full(self) -> bool:
        return self.save_type == SaveType.FULL

    def _create_series(self, group: h5py.Group, name: str, width: int | None = None):
        if width is None:
            shape, maxshape = (self.nsteps,), (None,)
        else:
            shape, maxshape = (self.nsteps, width), (None, width)
        group.create_dataset(
            name,
            shape=shape,
            maxshape=maxshape,
            dtype=np.float32,
            chunks=True,
            compression=self.compression,
            compression_opts=self.compression_opts,
        )

    def _create_full(self, file: h5py.File):
        full_group = file.create_group("full")
        self._create_series(full_group, "voltages", self.npoints + 2)
        self._create_series(full_group, "currents", self.npoints + 1)

    def _create(self, sim_params: SimulationParameters, script_content: str | None):
        """Create a new file, replacing any existing one."""
        self.filename.parent.mkdir(parents=True, exist_ok=True)

        with h5py.File(self.filename, "w") as file:
            for group_name in ("start", "end"):
                group = file.create_group(group_name)
                self._create_series(group, "voltages")
                self._create_series(group, "currents")

            if self.save_full:
                self._create_full(file)

            file.attrs["time_step"] = sim_params.delta_t
            file.attrs["length_step"] = sim_params.delta_z
            file.attrs["npoints"] = self.npoints
            file.attrs["created_at"] = datetime.now(timezone.utc).isoformat()
            file.attrs["solver_version"] = "0.1.0"
            if script_content:
                file.attrs["script_hash"] = hashlib.sha256(script_content.encode()).hexdigest()
                file.attrs["script_content"] = script_content

    def _prepare_append(self):
        """Grow the datasets of an existing file by ``nsteps`` rows."""
        with h5py.File(self.filename, "a") as file:
            previous_rows = file["end/voltages"].shape[0]
            self.end_offset = previous_rows
            for name in BOUNDARY_DATASETS:
                file[name].resize((previous_rows + self.nsteps,))

            if not self.save_full:
                return

            if "full" in file:
                full_voltages = file["full/voltages"]
                if full_voltages.shape[1] != self.npoints + 2:
                    raise ValueError(
                        f"Cannot append to '{self.filename}': full data has "
                        f"{full_voltages.shape[1]} voltage columns, "
                        f"expected {self.npoints + 2}"
                    )
                previous_full = full_voltages.shape[0]
                self.full_offset = previous_full
                full_voltages.resize((previous_full + self.nsteps, self.npoints + 2))
                file["full/currents"].resize((previous_full + self.nsteps, self.npoints + 1))
            else:
                self._create_full(file)

    def write_batch(
        self,
        voltages: NDArray[np.floating],
        currents: NDArray[np.floating],
        start_index: int,
        end_index: int,
    ):
        """Write rows ``1..niters`` of a batch trajectory.

        Args:
            voltages: Batch voltage trajectory, shape (niters+1, N+2)
            currents: Batch current trajectory, shape (niters+1, N+1)
            start_index: Index of the batch's first step within the run
            end_index: Index one past the batch's last step within the run
        """
        niters = end_index - start_index
        rows = slice(start_index + self.end_offset, end_index + self.end_offset)

        with h5py.File(self.filename, "r+") as file:
            file["end/voltages"][rows] = voltages[1 : niters + 1, -1]
            file["end/currents"][rows] = currents[1 : niters + 1, -1]
            file["start/voltages"][rows] = voltages[1 : niters + 1, 0]
            file["start/currents"][rows] = currents[1 : niters + 1, 0]

            if self.save_full:
                full_rows = slice(start_index + self.full_offset, end_index + self.full_offset)
                file["full/voltages"][full_rows, :] = voltages[1 : niters + 1]
                file["full/currents"][full_rows, :] = currents[1 : niters + 1]


class HDF5ResultReader:
    """Reader for simulation results written by HDF5ResultWriter.

    Example:
        >>> with HDF5ResultReader("results.h5") as reader:
        ...     metadata = reader.get_metadata()
        ...     v_start, i_start = reader.load_start()
        ...     if reader.has_full:
        ...         voltages, currents = reader.load_full()
    """

    def __init__(self, filename: str | Path):
        self.filename = Path(filename)
        self.file = h5py.File(filename, "r")

    def get_metadata(self) -> dict[str, Any]:
        """File attributes, with ``delta_t``/``delta_z`` aliases for the steps."""
        metadata = dict(self.file.attrs)
        metadata["delta_t"] = float(metadata["time_step"])
        metadata["delta_z"] = float(metadata["length_step"])
        return metadata

    @property
    def num_rows(self) -> int:
        """Number of saved time steps in the boundary series."""
        return self.file["end/voltages"].shape[0]

    @property
    def has_full(self) -> bool:
        """True if the file holds full spatial trajectories."""
        return "full" in self.file

    def load_start(self) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Voltage and current series at the source end."""
        return self.file["start/voltages"][:], self.file["start/currents"][:]

    def load_end(self) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Voltage and current series at the terminator end."""
        return self.file["end/voltages"][:], self.file["end/currents"][:]

    def load_full(self) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """Voltage and current at every point for every saved row."""
        if not self.has_full:
            raise ValueError("No full trajectory data in file")
        return self.file["full/voltages"][:], self.file["full/currents"][:]

    def close(self):
        """Close the HDF5 file."""
        if self.file:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
