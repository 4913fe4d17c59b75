"""
Message, configuration, result and error types.

The heinzclient.types package holds the data that flows between the layers:

1. Wire messages
    - `Message` with its `MessageType` (one byte on the wire)
    - `OutputIndex` naming the artifacts `GET_OUTPUT` can fetch

2. Configuration
    - `FittingConfig` and `SolverConfig` for one backend session each
    - `WorkflowConfig` for a fit-then-solve run
    - All are mashumaro dataclasses, so they can be built with `from_dict`

3. Results
    - `NotFitted | Fitted` for the BUM model parameters
    - `WorkflowResult` bundling fit, membership and plot

4. Errors
    - `CommsError` and its `FramingError`/`ProtocolError` subclasses
    - `ValidationError` and `InputStateError` for caller mistakes

Examples
--------
Building a message by hand:
```python
from heinzclient.types import Message, MessageType
msg = Message(MessageType.PARAMETER, "-s", b"10")
# same as
msg = Message.parameter("-s", "10")
```

Loading a workflow configuration:
```python
from heinzclient.types import WorkflowConfig
config = WorkflowConfig.from_dict(
    {"fit_bum": True, "fitting": {"port": 9000, "starts": 20}}
)
```

See Also
--------
heinzclient.protocol : Frame codec and connection
heinzclient.session : Fitting and solver sessions
"""

from __future__ import annotations

from .config import (
    BackendConfig,
    FittingConfig,
    SolverConfig,
    WorkflowConfig,
)
from .errors import (
    CommsError,
    FramingError,
    HeinzClientError,
    InputStateError,
    OutputParseError,
    ProtocolError,
    ValidationError,
)
from .messages import Message, MessageType, OutputIndex
from .results import (
    NOT_FITTED,
    Fitted,
    FittingResult,
    NotFitted,
    WorkflowResult,
)

__all__ = [
    "BackendConfig",
    "FittingConfig",
    "SolverConfig",
    "WorkflowConfig",
    "HeinzClientError",
    "CommsError",
    "FramingError",
    "ProtocolError",
    "OutputParseError",
    "ValidationError",
    "InputStateError",
    "Message",
    "MessageType",
    "OutputIndex",
    "NOT_FITTED",
    "Fitted",
    "FittingResult",
    "NotFitted",
    "WorkflowResult",
]
