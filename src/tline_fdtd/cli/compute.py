"""Command-line tool for executing transmission line simulation scripts.

The tline-compute CLI tool executes simulation scripts with progress
tracking and HDF5 output generation.
"""

import hashlib
import math
import sys
import time
from pathlib import Path

import click
from rich.console import Console

from tline_fdtd.io import SaveSettings, SaveType

from .executor import RestrictedImportError, execute_simulation_script, validate_simulation_object
from .progress import SimulationProgress, format_time, print_simulation_info

console = Console()

DEFAULT_NUM_STEPS = 1000


@click.command()
@click.argument("script", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file path (default: results_{hash}.h5)",
)
@click.option(
    "--save-type",
    type=click.Choice(["end", "full"]),
    default="end",
    help="Save only the line end points, or every point (default: end)",
)
@click.option(
    "--append",
    is_flag=True,
    help="Append to an existing output file instead of replacing it",
)
@click.option(
    "--duration",
    "-d",
    type=float,
    help="Simulated time in seconds (default: script's 'duration' or 'num_steps')",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output with debug info")
@click.option("--dry-run", is_flag=True, help="Validate script without running simulation")
@click.version_option(version="0.1.0", prog_name="tline-compute")
def main(
    script: Path,
    output: Path | None,
    save_type: str,
    append: bool,
    duration: float | None,
    verbose: bool,
    dry_run: bool,
):
    """Execute a transmission line simulation from a Python script.

    SCRIPT is the path to a Python file that defines a 'simulation' variable
    containing a Simulation instance. The simulation will be run and
    results saved to an HDF5 file.

    Example script:

    \b
        from tline_fdtd import (FdtdSolver, LinearLine, MatchedTerminator,
                                MatchedVSource, Simulation, SineWave)
        line = LinearLine(length=2.0, npoints=1000,
                          capacitance=400e-12, inductance=1e-6)
        solver = FdtdSolver(
            tline=line,
            source=MatchedVSource(SineWave(4e8), 1e-6, 400e-12),
            terminator=MatchedTerminator(1e-6, 400e-12),
        )
        simulation = Simulation(solver, line.calculate_simulation_parameters(2.0))
        duration = 1e-7

    Exits with 0 on success, 1 on error and 130 when interrupted.
    """
    sys.exit(run_script(script, output, save_type, append, duration, verbose, dry_run))


def run_script(
    script: Path,
    output: Path | None,
    save_type: str,
    append: bool,
    duration: float | None,
    verbose: bool,
    dry_run: bool,
) -> int:
    """Run a simulation script and return the process exit code."""
    try:
        console.print(f"\n[bold]Transmission Line Simulation:[/bold] {script.name}", style="blue")
        console.print("─" * 60)

        script_content = script.read_text()
        script_hash = hashlib.sha256(script_content.encode()).hexdigest()

        if verbose:
            console.print(f"Script hash: {script_hash}")

        if output is None:
            output = Path(f"results_{script_hash[:8]}.h5")

        console.print("Loading simulation...", style="dim")
        try:
            namespace = execute_simulation_script(script, script_content, verbose=verbose)
        except RestrictedImportError as e:
            console.print(f"\n[bold red]Security Error:[/bold red] {e}")
            return 1
        except SyntaxError as e:
            console.print("\n[bold red]Syntax Error in script:[/bold red]")
            console.print(f"  {e}")
            return 1

        try:
            simulation = validate_simulation_object(namespace)
        except ValueError as e:
            console.print(f"\n[bold red]Error:[/bold red] {e}")
            return 1

        delta_t = simulation.sim_params.delta_t
        if duration is None:
            duration = namespace.get("duration")
        if duration is None:
            duration = namespace.get("num_steps", DEFAULT_NUM_STEPS) * delta_t
        num_steps = math.ceil(duration / delta_t)

        print_simulation_info(console, simulation, output, num_steps)

        if dry_run:
            console.print("[yellow]Dry run - simulation not executed[/yellow]")
            return 0

        save_settings = SaveSettings(
            filename=output,
            save_type=SaveType(save_type),
            overwrite=not append,
        )

        start_time = time.time()
        progress = SimulationProgress(console, simulation, num_steps)

        try:
            simulation.run(
                duration,
                save_settings=save_settings,
                callback=progress.update,
                script_content=script_content,
            )
        except KeyboardInterrupt:
            progress.finish()
            console.print("\n[yellow]Interrupted by user[/yellow]")
            return 130
        except Exception as e:
            progress.finish()
            console.print(f"\n[bold red]Simulation Error:[/bold red] {e}")
            if verbose:
                console.print_exception()
            return 1
        finally:
            progress.finish()

        runtime = time.time() - start_time

        console.print("─" * 60)
        console.print("✓ [bold green]Simulation complete![/bold green]")

        if output.exists():
            file_size = output.stat().st_size
            console.print(f"  Output: {output} ({file_size / 1e6:.1f} MB)")
        else:
            console.print(f"  Output: {output}")

        console.print(f"  Runtime: {format_time(runtime)}")
        console.print(f"  Final time: {simulation.state.time:.3e} s")

        if runtime > 0:
            throughput = num_steps * simulation.npoints / runtime / 1e6
            console.print(f"  Average throughput: {throughput:.1f} Mpoints/s")

        return 0

    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        return 1


if __name__ == "__main__":
    main()
