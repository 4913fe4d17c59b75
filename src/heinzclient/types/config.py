"""Configuration types for backend sessions and the fit-then-solve workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from mashumaro import DataClassDictMixin

from heinzclient.util.defaults import (
    DEFAULT_FDR,
    DEFAULT_FITTING_PORT,
    DEFAULT_HOST_ADDR,
    DEFAULT_SOLVER_PORT,
    DEFAULT_STARTS,
    DEFAULT_TIMEOUT,
)

from .validation import (
    validate_open_unit_interval,
    validate_port,
    validate_starts,
    validate_timeout,
)


@dataclass(kw_only=True)
class BackendConfig(DataClassDictMixin):
    """Where a backend listens and how long to wait for it.

    To be subclassed for each backend. `timeout` bounds every socket operation
    (RUN included); None blocks until the backend answers.
    """

    host: str = DEFAULT_HOST_ADDR
    port: int
    timeout: Optional[float] = DEFAULT_TIMEOUT

    def __post_init__(self):
        validate_port(self.port)
        validate_timeout(self.timeout)


@dataclass(kw_only=True)
class FittingConfig(BackendConfig):
    """Configuration for BUM model fitting."""

    port: int = DEFAULT_FITTING_PORT
    starts: int = DEFAULT_STARTS
    plot: bool = False

    def __post_init__(self):
        super().__post_init__()
        validate_starts(self.starts)


@dataclass(kw_only=True)
class SolverConfig(BackendConfig):
    """Configuration for Heinz module detection."""

    port: int = DEFAULT_SOLVER_PORT
    fdr: float = DEFAULT_FDR

    def __post_init__(self):
        super().__post_init__()
        validate_open_unit_interval(self.fdr, "FDR")


@dataclass(kw_only=True)
class WorkflowConfig(DataClassDictMixin):
    """Configuration for a fit-then-solve workflow.

    If `fit_bum` is False the BUM parameters are not fitted and `lambda_` and
    `a` must be given instead.
    """

    fit_bum: bool = True
    lambda_: Optional[float] = None
    a: Optional[float] = None
    fitting: FittingConfig = field(default_factory=FittingConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)

    def __post_init__(self):
        if not self.fit_bum:
            validate_open_unit_interval(self.lambda_, "lambda")
            validate_open_unit_interval(self.a, "a")
