"""Tests for the source and terminator boundary circuits."""

import numpy as np
import pytest

from tline_fdtd import (
    MatchedTerminator,
    MatchedVSource,
    SimulationParameters,
    SineWave,
    StepWave,
    Terminator,
    VSource,
)

C = 400e-12
L = 1e-6


@pytest.fixture
def params():
    return SimulationParameters(delta_z=0.05, delta_t=5e-10)


class TestMatchedVSource:
    def test_impedance(self):
        source = MatchedVSource(waveform=SineWave(1e8), inductance=L, capacitance=C)
        assert source.impedance == pytest.approx(50.0)

    def test_generate_delegates_to_waveform(self):
        source = MatchedVSource(waveform=SineWave(1e8, amplitude=2.0), inductance=L, capacitance=C)
        assert source.generate(2.5e-9) == pytest.approx(2.0)

    def test_accepts_plain_function(self):
        source = MatchedVSource(waveform=lambda t: 3.0, inductance=L, capacitance=C)
        assert source.generate(0.0) == 3.0

    @pytest.mark.parametrize("inductance, capacitance", [(0.0, C), (L, 0.0), (-L, C)])
    def test_invalid_line_constants(self, inductance, capacitance):
        with pytest.raises(ValueError):
            MatchedVSource(waveform=SineWave(1e8), inductance=inductance, capacitance=capacitance)

    def test_next_voltage_formula(self, params):
        source = MatchedVSource(
            waveform=StepWave(amplitude=1.0),
            inductance=L,
            capacitance=C,
            resistance=2.0,
            conductance=1e-3,
        )
        r = params.d_ratio
        rt = 0.05 * 2.0 + 50.0
        gloss = 0.05 * 1e-3 / 2

        v0, i0 = 0.2, 0.004
        source_curr = ((r * L - rt / 2) * i0 + (1.0 - v0)) / (r * L + rt / 2)
        expected = ((r * C - gloss) * v0 + (source_curr - i0)) / (r * C + gloss)

        assert source.next_voltage(0.0, v0, i0, params) == pytest.approx(expected)

    def test_steady_state_is_voltage_divider(self, params):
        """Half the generator voltage appears across a matched load."""
        source = MatchedVSource(waveform=StepWave(amplitude=1.0), inductance=L, capacitance=C)
        v0 = 0.5
        i0 = v0 / source.impedance
        assert source.next_voltage(1e-6, v0, i0, params) == pytest.approx(v0)

    def test_is_vsource(self):
        assert isinstance(MatchedVSource(SineWave(1e8), L, C), VSource)


class TestMatchedTerminator:
    def test_admittance(self):
        terminator = MatchedTerminator(inductance=L, capacitance=C)
        assert terminator.admittance == pytest.approx(0.02)

    @pytest.mark.parametrize("inductance, capacitance", [(0.0, C), (L, -C)])
    def test_invalid_line_constants(self, inductance, capacitance):
        with pytest.raises(ValueError):
            MatchedTerminator(inductance=inductance, capacitance=capacitance)

    def test_next_voltage_formula(self, params):
        terminator = MatchedTerminator(inductance=L, capacitance=C, conductance=1e-3)
        r = params.d_ratio
        gt = 0.05 * 1e-3 + 0.02

        expected = ((r * C - gt / 2) * 0.3 + 0.01) / (r * C + gt / 2)
        assert terminator.next_voltage(0.3, 0.01, params) == pytest.approx(expected)

    def test_next_current_formula(self, params):
        terminator = MatchedTerminator(inductance=L, capacitance=C, resistance=4.0)
        r = params.d_ratio
        loss = 0.05 * 4.0 / 2

        expected = ((r * L - loss) * 0.01 + (0.5 - 0.2)) / (r * L + loss)
        assert terminator.next_current(0.5, 0.2, 0.01, params) == pytest.approx(expected)

    def test_load_current_fixed_point(self, params):
        """A node voltage V with load current V/Z0 is stationary."""
        terminator = MatchedTerminator(inductance=L, capacitance=C)
        voltage = 0.5
        assert terminator.next_voltage(voltage, voltage * 0.02, params) == pytest.approx(voltage)

    def test_is_terminator(self):
        assert isinstance(MatchedTerminator(L, C), Terminator)


class TestCustomBoundary:
    def test_subclass_requires_all_methods(self):
        class Incomplete(Terminator):
            def next_voltage(self, last_volt, last_curr, sim_params):
                return 0.0

        with pytest.raises(TypeError):
            Incomplete()

    def test_short_circuit_terminator(self, small_line, sim_params, zero_state):
        """A user boundary plugs into the solver like the built-in ones."""
        from tline_fdtd import FdtdSolver

        class ShortCircuit(Terminator):
            def next_voltage(self, last_volt, last_curr, sim_params):
                return 0.0

            def next_current(self, left_volt, right_volt, last_curr, sim_params):
                return last_curr + (left_volt - right_volt) / (sim_params.d_ratio * L)

        solver = FdtdSolver(
            tline=small_line,
            source=MatchedVSource(StepWave(), L, C),
            terminator=ShortCircuit(),
        )
        voltages, _ = solver.compute(zero_state, sim_params, nsteps=200)

        np.testing.assert_array_equal(voltages[:, -1], 0.0)
