"""Script execution sandbox for transmission line simulations.

Simulation scripts build a ``Simulation`` from tline_fdtd components. They
run in a controlled namespace where only a few scientific modules may be
imported.
"""

import builtins
import sys
from pathlib import Path
from typing import Any

#: Top-level modules a simulation script may import.
ALLOWED_MODULES = frozenset(
    {
        "tline_fdtd",
        "numpy",
        "scipy",
        "math",
        "pathlib",
    }
)


#: Value of ``__name__`` inside executed scripts, so an
#: ``if __name__ == "__main__":`` block only runs when the script is run directly.
SCRIPT_MODULE_NAME = "__tline_script__"


class RestrictedImportError(ImportError):
    """Raised when a disallowed module import is attempted."""


def execute_simulation_script(
    script_path: Path, script_content: str, verbose: bool = False
) -> dict[str, Any]:
    """Execute simulation script in controlled namespace.

    The script gets its own copy of the builtins whose ``__import__`` only
    accepts modules from ``ALLOWED_MODULES``; the interpreter-wide builtins
    are left untouched.

    Args:
        script_path: Path to the script file (for __file__ and relative imports)
        script_content: Content of the script to execute
        verbose: If True, print debug information

    Returns:
        Namespace dict containing all variables defined by the script

    Raises:
        RestrictedImportError: If script attempts to import disallowed module
        SyntaxError: If script has syntax errors
        Exception: Any exception raised by the script during execution
    """
    original_import = builtins.__import__

    def restricted_import(name, globals=None, locals=None, fromlist=(), level=0):
        top_level = name.split(".")[0]
        if level == 0 and top_level not in ALLOWED_MODULES:
            raise RestrictedImportError(
                f"Import of '{name}' is not allowed in simulation scripts. "
                f"Allowed modules: {', '.join(sorted(ALLOWED_MODULES))}"
            )
        return original_import(name, globals, locals, fromlist, level)

    script_builtins = dict(vars(builtins))
    script_builtins["__import__"] = restricted_import

    namespace: dict[str, Any] = {
        "__name__": SCRIPT_MODULE_NAME,
        "__file__": str(script_path),
        "__builtins__": script_builtins,
    }

    script_dir = str(script_path.parent)
    sys.path.insert(0, script_dir)
    try:
        if verbose:
            print(f"Executing script: {script_path}")

        code = compile(script_content, str(script_path), "exec")
        exec(code, namespace)

        if verbose:
            defined_vars = [k for k in namespace if not k.startswith("__")]
            print(f"Script defined variables: {', '.join(defined_vars)}")
    finally:
        if script_dir in sys.path:
            sys.path.remove(script_dir)

    return namespace


def validate_simulation_object(namespace: dict[str, Any]) -> Any:
    """Validate that namespace contains a valid simulation object.

    Args:
        namespace: Namespace dict from script execution

    Returns:
        The simulation object

    Raises:
        ValueError: If no simulation found or it is invalid
    """
    simulation = namespace.get("simulation")

    if simulation is None:
        raise ValueError(
            "Script must define a 'simulation' variable. "
            "Example: simulation = Simulation(solver=solver, sim_params=sim_params)"
        )

    required_attributes = ["run", "sim_params", "solver", "state"]
    missing = [m for m in required_attributes if not hasattr(simulation, m)]

    if missing:
        raise ValueError(
            f"'simulation' object is missing required attributes: {', '.join(missing)}. "
            f"Make sure it's a Simulation instance."
        )

    return simulation
