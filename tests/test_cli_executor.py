"""Tests for CLI script executor."""

import builtins
import tempfile
from pathlib import Path

import pytest

from tline_fdtd.cli.executor import (
    SCRIPT_MODULE_NAME,
    RestrictedImportError,
    execute_simulation_script,
    validate_simulation_object,
)

SIMULATION_SCRIPT = """
from tline_fdtd import (
    FdtdSolver,
    LinearLine,
    MatchedTerminator,
    MatchedVSource,
    Simulation,
    SineWave,
)

line = LinearLine(length=1.0, npoints=10, capacitance=400e-12, inductance=1e-6)
solver = FdtdSolver(
    tline=line,
    source=MatchedVSource(SineWave(4e8), 1e-6, 400e-12),
    terminator=MatchedTerminator(1e-6, 400e-12),
)
simulation = Simulation(solver, line.calculate_simulation_parameters(2.0))
test_value = 42
"""


def _write_script(script_content):
    with tempfile.NamedTemporaryFile(mode="w", suffix=".py", delete=False) as f:
        f.write(script_content)
        return Path(f.name)


def test_execute_valid_script():
    """Test executing a valid simulation script."""
    script_path = _write_script(SIMULATION_SCRIPT)

    try:
        namespace = execute_simulation_script(script_path, SIMULATION_SCRIPT)

        assert "simulation" in namespace
        assert "solver" in namespace
        assert namespace["test_value"] == 42
    finally:
        script_path.unlink()


def test_execute_script_with_numpy():
    """Test that numpy and scipy imports are allowed."""
    script_content = """
import math
import numpy as np
from scipy.io import wavfile

arr = np.array([1, 2, 3])
result = arr.sum()
root = math.sqrt(4)
"""
    script_path = _write_script(script_content)

    try:
        namespace = execute_simulation_script(script_path, script_content)

        assert namespace["result"] == 6
        assert namespace["root"] == 2.0
    finally:
        script_path.unlink()


@pytest.mark.parametrize("module", ["os", "subprocess", "h5py"])
def test_execute_script_restricted_import(module):
    """Test that restricted imports are blocked."""
    script_content = f"import {module}\n"
    script_path = _write_script(script_content)

    try:
        with pytest.raises(RestrictedImportError) as exc_info:
            execute_simulation_script(script_path, script_content)

        assert module in str(exc_info.value)
    finally:
        script_path.unlink()


def test_restricted_import_is_import_error():
    assert issubclass(RestrictedImportError, ImportError)


def test_execute_script_leaves_builtins_alone():
    """The restricted import only applies inside the script."""
    original_import = builtins.__import__
    script_content = "import numpy\n"
    script_path = _write_script(script_content)

    try:
        execute_simulation_script(script_path, script_content)
    finally:
        script_path.unlink()

    assert builtins.__import__ is original_import


def test_execute_script_main_guard_skipped():
    """Code under ``if __name__ == "__main__"`` does not run."""
    script_content = """
ran_main = False
module_name = __name__
if __name__ == "__main__":
    ran_main = True
"""
    script_path = _write_script(script_content)

    try:
        namespace = execute_simulation_script(script_path, script_content)
    finally:
        script_path.unlink()

    assert namespace["ran_main"] is False
    assert namespace["module_name"] == SCRIPT_MODULE_NAME


def test_execute_script_syntax_error():
    """Test that syntax errors are propagated."""
    script_content = """
this is not valid python syntax!
"""
    script_path = _write_script(script_content)

    try:
        with pytest.raises(SyntaxError):
            execute_simulation_script(script_path, script_content)
    finally:
        script_path.unlink()


def test_execute_script_restores_sys_path():
    import sys

    script_content = "value = 1\n"
    script_path = _write_script(script_content)
    before = list(sys.path)

    try:
        execute_simulation_script(script_path, script_content)
    finally:
        script_path.unlink()

    assert sys.path == before


def test_validate_simulation_valid():
    """Test validating a valid simulation object."""
    script_path = _write_script(SIMULATION_SCRIPT)
    try:
        namespace = execute_simulation_script(script_path, SIMULATION_SCRIPT)
    finally:
        script_path.unlink()

    result = validate_simulation_object(namespace)
    assert result is namespace["simulation"]


def test_validate_simulation_missing():
    """Test validation when simulation is missing."""
    namespace = {"other_var": 42}

    with pytest.raises(ValueError) as exc_info:
        validate_simulation_object(namespace)

    assert "must define a 'simulation'" in str(exc_info.value)


def test_validate_simulation_invalid():
    """Test validation when simulation is not a valid object."""
    namespace = {"simulation": "not a simulation"}

    with pytest.raises(ValueError) as exc_info:
        validate_simulation_object(namespace)

    assert "missing required attributes" in str(exc_info.value)
