"""
Example: Lossless Matched Line
==============================
A 400 MHz sine wave driven into a 2 m lossless line with a matched source
and load. The line reaches steady state after one transit; the second run
saves the full voltage/current profile into the same file.

Output: data/simple_tline.h5 (end data for both runs, full data for run 2)

Line: 2 m, 10,000 cells, C = 400 pF/m, L = 1 µH/m (Z0 = 50 Ω)
Source: 1 V sine at 400 MHz

Run directly with ``python simple_line.py`` or through the CLI with
``tline-compute simple_line.py --save-type full``.
"""

from tline_fdtd import (
    FdtdSolver,
    LinearLine,
    MatchedTerminator,
    MatchedVSource,
    SaveSettings,
    SaveType,
    Simulation,
    SineWave,
)

capacitance = 400e-12  # [F / m]
inductance = 1e-6  # [H / m]
resistance = 0.0  # [Ω / m]
conductance = 0.0  # [S / m]

npoints = 10_000

# Create a simple lossless transmission line
tline = LinearLine(
    length=2.0,  # [m]
    npoints=npoints,
    capacitance=capacitance,
    inductance=inductance,
    resistance=resistance,
    conductance=conductance,
)

# Numerical speed is twice the phase velocity
sim_params = tline.calculate_simulation_parameters(courant=2.0)

solver = FdtdSolver(
    tline=tline,
    source=MatchedVSource(
        waveform=SineWave(frequency=4e8),
        inductance=inductance,
        capacitance=capacitance,
        resistance=resistance,
        conductance=conductance,
    ),
    terminator=MatchedTerminator(
        inductance=inductance,
        capacitance=capacitance,
        resistance=resistance,
        conductance=conductance,
    ),
)

simulation = Simulation(solver=solver, sim_params=sim_params)
duration = 1e-7  # [s]

if __name__ == "__main__":
    print("=" * 60)
    print("General Simulation Info")
    print("=" * 60)
    print(f"# of points:  {npoints}")
    print(f"Δz:           {sim_params.delta_z:<9.2e} m")
    print(f"Δt:           {sim_params.delta_t:<9.2e} s")
    print()

    print("-- Run Part 1 --")
    # Get to a steady state and save end data
    simulation.run(
        duration,
        verbose=True,
        save_settings=SaveSettings(
            "data/simple_tline.h5", save_type=SaveType.END, overwrite=True
        ),
    )

    print("-- Run Part 2 --")
    # Save full data at steady state
    simulation.run(
        duration,
        verbose=True,
        save_settings=SaveSettings(
            "data/simple_tline.h5", save_type=SaveType.FULL, overwrite=False
        ),
    )
