"""Progress display for transmission line simulations.

Provides rich terminal UI for real-time simulation progress tracking including:
- Progress bar with percentage
- Elapsed time and ETA
- Computational throughput (Mpoints/s)
- Memory usage
"""

import time
from typing import TYPE_CHECKING

import psutil
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

if TYPE_CHECKING:
    from tline_fdtd.core.simulation import Simulation


def format_time(seconds: float) -> str:
    """Format time duration for display.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string like "1m 23s" or "2h 15m"
    """
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs:02d}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes:02d}m"


def format_bytes(num_bytes: float) -> str:
    """Format byte count for display, e.g. "1.5 GB" or "256.0 MB"."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(num_bytes) < 1024.0:
            return f"{num_bytes:.1f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.1f} PB"


class SimulationProgress:
    """Real-time progress display for a simulation run.

    Intended as the ``callback`` of ``Simulation.run``; it only reads the
    step index and never touches simulation state.

    Example:
        >>> progress = SimulationProgress(console, simulation, num_steps)
        >>> simulation.run(1e-7, callback=progress.update)
        >>> progress.finish()
    """

    def __init__(
        self,
        console: Console,
        simulation: "Simulation",
        num_steps: int,
        update_interval: float = 0.1,
    ):
        """Initialize progress display.

        Args:
            console: Rich console instance
            simulation: Simulation being run
            num_steps: Total number of timesteps
            update_interval: Minimum time between updates (seconds)
        """
        self.console = console
        self.simulation = simulation
        self.num_steps = num_steps
        self.update_interval = update_interval

        self.start_time = time.time()
        self.last_update = 0.0
        self.peak_memory = 0.0
        self._finished = False

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            TextColumn("•"),
            TimeRemainingColumn(),
            console=console,
        )

        self.task = self.progress.add_task("Computing", total=num_steps)
        self.progress.start()

    def update(self, step: int):
        """Update progress display for the step just completed.

        Updates are rate limited to ``update_interval`` to keep the
        per-step overhead small.

        Args:
            step: Current timestep number (0-indexed)
        """
        current_time = time.time()
        if current_time - self.last_update < self.update_interval:
            return

        self.progress.update(self.task, completed=step + 1)

        elapsed = current_time - self.start_time
        steps_completed = step + 1

        if elapsed > 0 and steps_completed > 0:
            points_per_second = (steps_completed * self.simulation.npoints) / elapsed
            throughput_mpoints = points_per_second / 1e6
        else:
            throughput_mpoints = 0

        memory_bytes = psutil.Process().memory_info().rss
        self.peak_memory = max(self.peak_memory, memory_bytes)

        stats_parts = [
            f"Speed: {throughput_mpoints:.1f} Mpoints/s",
            f"Memory: {format_bytes(memory_bytes)}",
            f"(peak: {format_bytes(self.peak_memory)})",
        ]
        self.progress.update(self.task, description=" | ".join(stats_parts))

        self.last_update = current_time

    def finish(self):
        """Stop the progress display. Safe to call more than once."""
        if self._finished:
            return
        self._finished = True
        self.progress.update(self.task, completed=self.num_steps)
        self.progress.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()


def print_simulation_info(
    console: Console, simulation: "Simulation", output_path, num_steps: int
):
    """Print simulation parameters before running.

    Args:
        console: Rich console instance
        simulation: Simulation to describe
        output_path: Path to output file
        num_steps: Number of timesteps to run
    """
    sim_params = simulation.sim_params
    tline = simulation.solver.tline

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Line", f"{type(tline).__name__}, {tline.length:g} m")
    table.add_row("Points", f"{tline.npoints}")
    table.add_row("Δz", f"{sim_params.delta_z:.2e} m")
    table.add_row("Δt", f"{sim_params.delta_t:.2e} s")
    total_time = sim_params.delta_t * num_steps
    table.add_row("Duration", f"{num_steps} steps ({total_time:.2e} s)")
    table.add_row("Batch", f"{simulation.batch_size(num_steps) - 1} steps")
    table.add_row("Output", str(output_path))

    console.print(table)
    console.print()
