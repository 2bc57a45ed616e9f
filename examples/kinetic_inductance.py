"""
Example: Kinetic Inductance Line
================================
The same drive as simple_line.py into a superconducting line where half of
the inductance is kinetic. The current-dependent inductance generates odd
harmonics of the 400 MHz drive as the wave travels down the line.

Output: data/ki_tline.h5 (end data for both runs, full data for run 2)

Line: 2 m, 10,000 cells, C = 400 pF/m, L = 0.5 µH/m + 0.5 µH/m kinetic
Critical current: 0.2 A
"""

from tline_fdtd import (
    FdtdSolver,
    KiLine,
    MatchedTerminator,
    MatchedVSource,
    SaveSettings,
    SaveType,
    Simulation,
    SineWave,
)

capacitance = 400e-12  # [F / m]
inductance = 1e-6  # [H / m]
critical_current = 2e-1  # [A]

npoints = 10_000

tline = KiLine(
    length=2.0,  # [m]
    npoints=npoints,
    capacitance=capacitance,
    inductance=inductance / 2.0,
    kinetic_inductance=inductance / 2.0,
    critical_current=critical_current,
)

sim_params = tline.calculate_simulation_parameters(courant=2.0)

# Boundaries are matched to the small-signal impedance of the line
solver = FdtdSolver(
    tline=tline,
    source=MatchedVSource(
        waveform=SineWave(frequency=4e8),
        inductance=inductance,
        capacitance=capacitance,
    ),
    terminator=MatchedTerminator(inductance=inductance, capacitance=capacitance),
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
    simulation.run(
        duration,
        verbose=True,
        save_settings=SaveSettings("data/ki_tline.h5", save_type=SaveType.END, overwrite=True),
    )

    print("-- Run Part 2 --")
    simulation.run(
        duration,
        verbose=True,
        save_settings=SaveSettings("data/ki_tline.h5", save_type=SaveType.FULL, overwrite=False),
    )
