"""
Sessions driving the two analysis backends.

Each session owns exactly one `Connection` and runs one ordered exchange:

- `FittingSession` fits a BUM model to p-values (λ, a, optional plot)
- `SolverSession` runs Heinz and returns per-node module membership
- `run_workflow` chains the two

See Also
--------
heinzclient.protocol : Frame codec and connection
heinzclient.session.parsers : Output artifact parsers
"""

from .fitting import FittingSession
from .parsers import parse_fitting_report, parse_module_result
from .solver import SolverSession
from .workflow import run_workflow

__all__ = [
    "FittingSession",
    "SolverSession",
    "parse_fitting_report",
    "parse_module_result",
    "run_workflow",
]
