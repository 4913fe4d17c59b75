"""
Solver session: drives the Heinz module detection backend.

Given node scores, an edge list, and the BUM model parameters, Heinz finds the
maximum-scoring connected module. The exchange is

1. `PARAMETER -p` (enable preprocessing)
2. `OUTPUT_FILE -o` (register the node score output)
3. `INPUT_FILE -n` (node table)
4. `INPUT_FILE -e` (edge table)
5. `PARAMETER -lambda`, `-a`, `-FDR`
6. `RUN`
7. `GET_OUTPUT 0`, parsed into a membership map

Examples
--------
```python
from heinzclient.session import SolverSession

scores = {1: 0.001, 2: 0.4, 3: 0.0002}
edges = [(1, 2), (2, 3)]
with SolverSession("localhost", 9001) as solver:
    membership = solver.solve(scores, edges, lambda_=0.3, a=0.2, fdr=0.01)
```
"""

from __future__ import annotations

from typing import Iterable, Mapping, MutableMapping, Optional

from loguru import logger

from heinzclient.protocol import Connection
from heinzclient.types import (
    InputStateError,
    Message,
    OutputIndex,
    SolverConfig,
    ValidationError,
)
from heinzclient.types.validation import (
    validate_edges,
    validate_open_unit_interval,
    validate_score_table,
)
from heinzclient.util import (
    DEFAULT_HOST_ADDR,
    DEFAULT_SOLVER_PORT,
    DEFAULT_TIMEOUT,
    format_edge_table,
    format_float_parameter,
    format_node_table,
)

from ._common import aborts_session_on_error
from .parsers import parse_module_result

PREPROCESS_FLAG = "-p"
OUTPUT_FLAG = "-o"
NODE_TABLE_FLAG = "-n"
EDGE_TABLE_FLAG = "-e"
LAMBDA_FLAG = "-lambda"
A_FLAG = "-a"
FDR_FLAG = "-FDR"
RESULT_OUTPUT = OutputIndex.PRIMARY


class SolverSession:
    """
    One module detection run on the Heinz backend.

    The session owns its connection, which is opened on the first request and
    closed by `close()` or on leaving a `with` block. Node scores are passed
    on as given; only their shape is checked.

    Parameters
    ----------
    host : str, optional
        Heinz backend host, by default DEFAULT_HOST_ADDR
    port : int, optional
        Heinz backend port, by default DEFAULT_SOLVER_PORT
    timeout : float | None, optional
        Per socket operation timeout in seconds, by default None (block)
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST_ADDR,
        port: int = DEFAULT_SOLVER_PORT,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self._connection = Connection(host, port, timeout)
        self._output_registered = False
        self._sent: set[str] = set()
        self._ran = False
        self._membership: Optional[dict[int, bool]] = None

    @classmethod
    def from_config(cls, config: SolverConfig) -> SolverSession:
        return cls(config.host, config.port, config.timeout)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._connection!r})"

    def __enter__(self) -> SolverSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def connection(self) -> Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    # ------------------------------------------------------------------------
    # individual protocol steps

    def _ack(self, message: Message) -> None:
        self._connection.send_and_ack(message)
        self._sent.add(message.name)

    @aborts_session_on_error
    def enable_preprocessing(self) -> None:
        self._ack(Message.parameter(PREPROCESS_FLAG))

    @aborts_session_on_error
    def register_output(self) -> None:
        """Ask Heinz to keep its node score output for retrieval."""
        self._ack(Message.output_file(OUTPUT_FLAG))
        self._output_registered = True

    @aborts_session_on_error
    def send_node_table(self, scores: Mapping[int, float]) -> None:
        """Send the node table: integer node key to score."""
        rows = validate_score_table(scores)
        self._ack(Message.input_file(NODE_TABLE_FLAG, format_node_table(rows)))
        logger.info("Sent {} nodes to Heinz.", len(rows))

    @aborts_session_on_error
    def send_edge_table(self, edges: Iterable[tuple[int, int]]) -> None:
        """Send the edge table as (source, target) node key pairs."""
        pairs = validate_edges(edges)
        self._ack(Message.input_file(EDGE_TABLE_FLAG, format_edge_table(pairs)))
        logger.info("Sent {} edges to Heinz.", len(pairs))

    @aborts_session_on_error
    def send_lambda(self, lambda_: float) -> None:
        """Set the BUM mixture parameter, in (0, 1)."""
        value = validate_open_unit_interval(lambda_, "lambda")
        self._ack(Message.parameter(LAMBDA_FLAG, format_float_parameter(value)))

    @aborts_session_on_error
    def send_a(self, a: float) -> None:
        """Set the BUM shape parameter, in (0, 1)."""
        value = validate_open_unit_interval(a, "a")
        self._ack(Message.parameter(A_FLAG, format_float_parameter(value)))

    @aborts_session_on_error
    def send_fdr(self, fdr: float) -> None:
        """Set the false discovery rate, in (0, 1)."""
        value = validate_open_unit_interval(fdr, "FDR")
        self._ack(Message.parameter(FDR_FLAG, format_float_parameter(value)))

    @aborts_session_on_error
    def run(self) -> None:
        """Run Heinz with the inputs sent so far. Blocks until it finishes.

        Raises
        ------
        ValidationError
            If a node table, edge table or parameter has not been sent.
        InputStateError
            If this session has already run.
        ProtocolError
            If Heinz does not terminate successfully.
        """
        if self._ran:
            raise InputStateError("Session has already run, start a new one.")
        required = (NODE_TABLE_FLAG, EDGE_TABLE_FLAG, LAMBDA_FLAG, A_FLAG, FDR_FLAG)
        missing = [flag for flag in required if flag not in self._sent]
        if missing:
            raise ValidationError(
                f"Cannot run Heinz, inputs not sent: {', '.join(missing)}"
            )
        self._ran = True
        logger.info("Running Heinz...")
        self._connection.send_and_ack(Message.run())
        logger.info("Heinz finished.")

    @aborts_session_on_error
    def retrieve_results(
        self, membership: Optional[MutableMapping[int, bool]] = None
    ) -> MutableMapping[int, bool]:
        """Fetch and parse Heinz's node score output.

        Parameters
        ----------
        membership : MutableMapping[int, bool] | None, optional
            Mapping to write results into. Keys not mentioned in the output
            are left untouched. A new dict is used if None.

        Returns
        -------
        MutableMapping[int, bool]
            Node key to whether the node is in the module.

        Raises
        ------
        InputStateError
            If Heinz has not run, or its output was never registered.
        ProtocolError
            If no output is returned.
        OutputParseError
            If a result line is malformed.
        """
        if not self._output_registered:
            raise InputStateError("Heinz output file was never registered.")
        if not self._ran:
            raise InputStateError("Heinz has not run yet.")
        if self._membership is None:
            output = self._connection.fetch_output(RESULT_OUTPUT)
            self._membership = parse_module_result(output)
            logger.info(
                "Heinz module has {} of {} nodes.",
                sum(self._membership.values()),
                len(self._membership),
            )
        if membership is None:
            membership = {}
        membership.update(self._membership)
        return membership

    @aborts_session_on_error
    def get_backend_stderr(self) -> str:
        """Heinz's standard error stream, for diagnostics after a run."""
        if not self._ran:
            raise InputStateError("Heinz has not run yet.")
        return self._connection.fetch_output(OutputIndex.STDERR).decode(
            "ascii", errors="replace"
        )

    # ------------------------------------------------------------------------

    def solve(
        self,
        scores: Mapping[int, float],
        edges: Iterable[tuple[int, int]],
        lambda_: float,
        a: float,
        fdr: float,
    ) -> dict[int, bool]:
        """Run the whole module detection exchange.

        All inputs are validated before anything is sent.

        Parameters
        ----------
        scores : Mapping[int, float]
            Node key to p-value.
        edges : Iterable[tuple[int, int]]
            Edges as (source, target) node keys.
        lambda_ : float
            BUM mixture parameter, in (0, 1).
        a : float
            BUM shape parameter, in (0, 1).
        fdr : float
            False discovery rate, in (0, 1).

        Returns
        -------
        dict[int, bool]
            Node key to module membership, for every node in Heinz's output.
        """
        validate_score_table(scores)
        edges = validate_edges(edges)
        validate_open_unit_interval(lambda_, "lambda")
        validate_open_unit_interval(a, "a")
        validate_open_unit_interval(fdr, "FDR")
        if self._ran:
            raise InputStateError("Session has already run, start a new one.")

        self.enable_preprocessing()
        self.register_output()
        self.send_node_table(scores)
        self.send_edge_table(edges)
        self.send_lambda(lambda_)
        self.send_a(a)
        self.send_fdr(fdr)
        self.run()
        return dict(self.retrieve_results())
