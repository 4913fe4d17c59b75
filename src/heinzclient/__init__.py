# -*- coding: utf-8 -*-
"""
Client for the BUM model fitting and Heinz module detection backends.

heinzclient drives the two external backends over their binary session
protocol: it delivers parameters and input tables, runs the backend, and
parses what comes back into typed results.

Examples
--------
```python
import heinzclient

heinzclient.start_client_log(log_to_stdout=True)
with heinzclient.FittingSession("localhost", 9000) as fitter:
    fit = fitter.fit(pvalues, starts=10)
with heinzclient.SolverSession("localhost", 9001) as solver:
    membership = solver.solve(scores, edges, fit.lambda_, fit.a, fdr=0.01)
```

See Also
--------
heinzclient.protocol : Frame codec and connection
heinzclient.session : Fitting and solver sessions, workflow
heinzclient.types : Messages, configuration, results and errors
"""

from ._version import __version__
from .protocol import Connection
from .session import FittingSession, SolverSession, run_workflow
from .types import (
    CommsError,
    Fitted,
    FittingConfig,
    FramingError,
    InputStateError,
    NotFitted,
    OutputIndex,
    OutputParseError,
    ProtocolError,
    SolverConfig,
    ValidationError,
    WorkflowConfig,
    WorkflowResult,
)
from .util import shutdown_client_log, start_client_log

__all__ = [
    "__version__",
    "Connection",
    "FittingSession",
    "SolverSession",
    "run_workflow",
    "CommsError",
    "Fitted",
    "FittingConfig",
    "FramingError",
    "InputStateError",
    "NotFitted",
    "OutputIndex",
    "OutputParseError",
    "ProtocolError",
    "SolverConfig",
    "ValidationError",
    "WorkflowConfig",
    "WorkflowResult",
    "shutdown_client_log",
    "start_client_log",
]
