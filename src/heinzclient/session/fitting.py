"""
Fitting session: drives the BUM model fitting backend.

A session fits a beta-uniform mixture model to a list of p-values and returns
the mixture (λ) and shape (a) parameters, optionally with a PNG of diagnostic
plots. The exchange is

1. `PARAMETER -p` (enable preprocessing)
2. `INPUT_FILE -i` (one p-value per line)
3. `PARAMETER -s` (number of starts)
4. `OUTPUT_FILE -p` (only when plots are wanted)
5. `RUN`
6. `GET_OUTPUT 254` (the fitter's report on stdout), parsed for λ and a
7. `GET_OUTPUT 0` (the plot, only when plots are wanted)

Examples
--------
```python
from heinzclient.session import FittingSession

with FittingSession("localhost", 9000) as fitter:
    fit = fitter.fit([0.01, 0.5, 0.99], starts=10, plot=True)
    png = fitter.get_plot_png()
print(fit.lambda_, fit.a)
```
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from heinzclient.protocol import Connection
from heinzclient.types import (
    NOT_FITTED,
    FittingConfig,
    Fitted,
    FittingResult,
    InputStateError,
    Message,
    OutputIndex,
    ValidationError,
)
from heinzclient.types.validation import validate_pvalues, validate_starts
from heinzclient.util import (
    DEFAULT_FITTING_PORT,
    DEFAULT_HOST_ADDR,
    DEFAULT_STARTS,
    DEFAULT_TIMEOUT,
    format_int_parameter,
    format_pvalue_file,
)

from ._common import aborts_session_on_error
from .parsers import parse_fitting_report

PREPROCESS_FLAG = "-p"
PVALUES_FLAG = "-i"
STARTS_FLAG = "-s"
PLOT_FLAG = "-p"
REPORT_OUTPUT = OutputIndex.STDOUT
PLOT_OUTPUT = OutputIndex.PRIMARY


class FittingSession:
    """
    One BUM model fit on the fitting backend.

    The session owns its connection, which is opened on the first request and
    closed by `close()` or on leaving a `with` block. A session runs once;
    fit again with a new session.

    Parameters
    ----------
    host : str, optional
        Fitting backend host, by default DEFAULT_HOST_ADDR
    port : int, optional
        Fitting backend port, by default DEFAULT_FITTING_PORT
    timeout : float | None, optional
        Per socket operation timeout in seconds, by default None (block)
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST_ADDR,
        port: int = DEFAULT_FITTING_PORT,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self._connection = Connection(host, port, timeout)
        self._result: FittingResult = NOT_FITTED
        self._report: Optional[str] = None
        self._pvalues_sent = False
        self._plotting = False
        self._plot_png: Optional[bytes] = None
        self._ran = False

    @classmethod
    def from_config(cls, config: FittingConfig) -> FittingSession:
        return cls(config.host, config.port, config.timeout)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._connection!r})"

    def __enter__(self) -> FittingSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def result(self) -> FittingResult:
        """`NOT_FITTED` until `run()` has parsed the report, then `Fitted`."""
        return self._result

    @property
    def report(self) -> Optional[str]:
        """The fitter's raw report, once `run()` has completed."""
        return self._report

    def close(self) -> None:
        self._connection.close()

    # ------------------------------------------------------------------------
    # individual protocol steps

    @aborts_session_on_error
    def enable_preprocessing(self) -> None:
        self._connection.send_and_ack(Message.parameter(PREPROCESS_FLAG))

    @aborts_session_on_error
    def send_pvalues(self, pvalues: Sequence[float]) -> None:
        """Send the p-values to fit to, in order.

        Raises
        ------
        ValidationError
            If there are no p-values, or one is missing or outside [0, 1].
        """
        arr = validate_pvalues(pvalues)
        self._connection.send_and_ack(
            Message.input_file(PVALUES_FLAG, format_pvalue_file(arr))
        )
        self._pvalues_sent = True
        logger.info("Sent {} p-values to fitter.", arr.size)

    @aborts_session_on_error
    def send_starts(self, starts: int) -> None:
        """Set the number of random starts for the fit (positive integer)."""
        validate_starts(starts)
        self._connection.send_and_ack(
            Message.parameter(STARTS_FLAG, format_int_parameter(starts))
        )

    @aborts_session_on_error
    def enable_plotting(self) -> None:
        """Ask the fitter to produce diagnostic plots during `run()`."""
        self._connection.send_and_ack(Message.output_file(PLOT_FLAG))
        self._plotting = True

    @aborts_session_on_error
    def run(self) -> Fitted:
        """Fit the model and parse the fitter's report.

        Blocks until the fitter has finished.

        Returns
        -------
        Fitted
            The fitted parameters, also available via `result`.

        Raises
        ------
        ValidationError
            If no p-values have been sent.
        InputStateError
            If this session has already run.
        ProtocolError
            If the run fails or no report is returned.
        OutputParseError
            If the report does not hold each parameter exactly once, in (0, 1).
        """
        if self._ran:
            raise InputStateError("Session has already run, start a new one.")
        if not self._pvalues_sent:
            raise ValidationError("No p-values sent before running the fitter.")
        self._ran = True
        logger.info("Running BUM model fit...")
        self._connection.send_and_ack(Message.run())
        report = self._connection.fetch_output(REPORT_OUTPUT)
        self._report = report.decode("ascii", errors="replace")
        fitted = parse_fitting_report(self._report)
        self._result = fitted
        logger.info("BUM model fitted: lambda={}, a={}", fitted.lambda_, fitted.a)
        return fitted

    # ------------------------------------------------------------------------
    # results

    def _fitted(self) -> Fitted:
        if not isinstance(self._result, Fitted):
            raise InputStateError("No BUM model fit found, run the session first.")
        return self._result

    def get_lambda(self) -> float:
        """The fitted mixture parameter (λ)."""
        return self._fitted().lambda_

    def get_a(self) -> float:
        """The fitted shape parameter (a)."""
        return self._fitted().a

    @aborts_session_on_error
    def get_plot_png(self) -> bytes:
        """The diagnostic plots made during the fit, as PNG file contents.

        Raises
        ------
        InputStateError
            If plotting was not enabled, or the fit has not run.
        ProtocolError
            If the fitter returns no plot.
        """
        if not self._plotting:
            raise InputStateError("Plotting was not enabled for this session.")
        self._fitted()
        if self._plot_png is None:
            self._plot_png = self._connection.fetch_output(PLOT_OUTPUT)
            logger.info("Received {} byte plot from fitter.", len(self._plot_png))
        return self._plot_png

    @aborts_session_on_error
    def get_backend_stderr(self) -> str:
        """The fitter's standard error stream, for diagnostics after a run."""
        if not self._ran:
            raise InputStateError("The fitter has not run yet.")
        return self._connection.fetch_output(OutputIndex.STDERR).decode(
            "ascii", errors="replace"
        )

    # ------------------------------------------------------------------------

    def fit(
        self,
        pvalues: Sequence[float],
        starts: int = DEFAULT_STARTS,
        plot: bool = False,
    ) -> Fitted:
        """Run the whole fitting exchange.

        All inputs are validated before anything is sent. When `plot` is set
        the plot is retrieved as well, so `get_plot_png()` needs no further
        traffic.

        Parameters
        ----------
        pvalues : Sequence[float]
            p-values in [0, 1], in order.
        starts : int, optional
            Number of starts for the fit, by default DEFAULT_STARTS
        plot : bool, optional
            Whether to make diagnostic plots, by default False

        Returns
        -------
        Fitted
            The fitted λ and a.
        """
        pvalues = validate_pvalues(pvalues)
        validate_starts(starts)
        if self._ran:
            raise InputStateError("Session has already run, start a new one.")

        self.enable_preprocessing()
        self.send_pvalues(pvalues)
        self.send_starts(starts)
        if plot:
            self.enable_plotting()
        fitted = self.run()
        if plot:
            self.get_plot_png()
        return fitted
