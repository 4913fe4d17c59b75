"""Tests for the Heinz module detection session against a mock backend."""

import pytest
from loguru import logger

import heinzclient.util
from heinzclient.backend import MockBackend
from heinzclient.session import SolverSession
from heinzclient.types import (
    InputStateError,
    MessageType,
    OutputParseError,
    ProtocolError,
    SolverConfig,
    ValidationError,
)
from heinzclient.util import TEST_LOGLEVEL

SCORES = {101: 0.0001, 102: 0.5, 103: 0.002, 104: 0.9}
EDGES = [(101, 102), (101, 103), (103, 104)]
NODE_SCORES = "#label\tscore\n101\t3.2\n102\tNaN\n103\t1.7\n104\tnan\n"


class TestSolverSession:
    @pytest.fixture(autouse=True, scope="class")
    def client_log(self):
        heinzclient.util.start_client_log(
            log_level=TEST_LOGLEVEL, log_to_stdout=True, log_to_file=False
        )
        yield
        heinzclient.util.shutdown_client_log()

    @pytest.fixture(autouse=True)
    def log(self, request):
        logger.warning("STARTED Test '{}'".format(request.node.originalname))

        def fin():
            logger.warning("COMPLETED Test '{}' \n".format(request.node.originalname))

        request.addfinalizer(fin)

    @pytest.fixture()
    def solver_backend(self):
        with MockBackend.solver(NODE_SCORES) as mock:
            yield mock

    def test_solve(self, solver_backend):
        with SolverSession(*solver_backend.address) as solver:
            membership = solver.solve(SCORES, EDGES, lambda_=0.35, a=0.19, fdr=0.01)
        assert membership == {101: True, 102: False, 103: True, 104: False}
        assert solver.connection.is_closed

        assert solver_backend.requests() == [
            (MessageType.ALIVE, None),
            (MessageType.PARAMETER, "-p"),
            (MessageType.OUTPUT_FILE, "-o"),
            (MessageType.INPUT_FILE, "-n"),
            (MessageType.INPUT_FILE, "-e"),
            (MessageType.PARAMETER, "-lambda"),
            (MessageType.PARAMETER, "-a"),
            (MessageType.PARAMETER, "-FDR"),
            (MessageType.RUN, None),
            (MessageType.GET_OUTPUT, "0"),
        ]

    def test_payloads(self, solver_backend):
        with SolverSession(*solver_backend.address) as solver:
            solver.solve(SCORES, EDGES, lambda_=0.35, a=0.19, fdr=0.01)
        received = {(m.type, m.name): m.payload for m in solver_backend.received}
        assert received[(MessageType.INPUT_FILE, "-n")] == (
            b"#node\tpval\n101\t0.0001\n102\t0.5\n103\t0.002\n104\t0.9\n"
        )
        assert received[(MessageType.INPUT_FILE, "-e")] == (
            b"#source\ttarget\n101\t102\n101\t103\n103\t104\n"
        )
        assert received[(MessageType.PARAMETER, "-lambda")] == b"0.35"
        assert received[(MessageType.PARAMETER, "-a")] == b"0.19"
        assert received[(MessageType.PARAMETER, "-FDR")] == b"0.01"

    def test_node_table_refused(self):
        nack = {(MessageType.INPUT_FILE, "-n"): "Could not parse node file"}
        with MockBackend.solver(NODE_SCORES, nack=nack) as mock:
            solver = SolverSession(*mock.address)
            with pytest.raises(ProtocolError) as exc_info:
                solver.solve(SCORES, EDGES, lambda_=0.35, a=0.19, fdr=0.01)
            assert exc_info.value.diagnostic == "Could not parse node file"
            assert solver.connection.is_closed
            assert mock.disconnected.wait(5)
            assert mock.requests()[-1] == (MessageType.INPUT_FILE, "-n")
            solver.close()  # still fine after the abort

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"lambda_": 0.0},
            {"lambda_": 1.0},
            {"a": None},
            {"fdr": 1.0},
            {"fdr": 0},
            {"fdr": float("nan")},
        ],
    )
    def test_bad_parameters_rejected_before_io(self, solver_backend, kwargs):
        params = {"lambda_": 0.35, "a": 0.19, "fdr": 0.01} | kwargs
        with SolverSession(*solver_backend.address) as solver:
            with pytest.raises(ValidationError):
                solver.solve(SCORES, EDGES, **params)
        assert solver_backend.received == []

    @pytest.mark.parametrize(
        "scores, edges",
        [
            ({}, EDGES),
            ({101: None}, EDGES),
            ({"101": 0.1}, EDGES),
            (SCORES, [(101,)]),
            (SCORES, [(101, "102")]),
        ],
    )
    def test_bad_tables_rejected_before_io(self, solver_backend, scores, edges):
        with SolverSession(*solver_backend.address) as solver:
            with pytest.raises(ValidationError):
                solver.solve(scores, edges, lambda_=0.35, a=0.19, fdr=0.01)
        assert solver_backend.received == []

    def test_scores_not_range_checked(self, solver_backend):
        # Heinz accepts any score; only the table shape is checked here
        with SolverSession(*solver_backend.address) as solver:
            solver.solve({101: 7.5, 102: -2.0}, [], lambda_=0.35, a=0.19, fdr=0.01)
        received = {(m.type, m.name): m.payload for m in solver_backend.received}
        assert received[(MessageType.INPUT_FILE, "-n")] == b"#node\tpval\n101\t7.5\n102\t-2\n"

    def test_retrieve_results_updates_table(self, solver_backend):
        table = {101: False, 105: True}
        with SolverSession(*solver_backend.address) as solver:
            with pytest.raises(InputStateError):
                solver.retrieve_results(table)
            solver.register_output()
            solver.send_node_table(SCORES)
            solver.send_edge_table(EDGES)
            solver.send_lambda(0.35)
            solver.send_a(0.19)
            solver.send_fdr(0.01)
            with pytest.raises(InputStateError, match="not run"):
                solver.retrieve_results(table)
            solver.run()
            result = solver.retrieve_results(table)
        assert result is table
        # 105 is not in the output and keeps its value
        assert table == {101: True, 102: False, 103: True, 104: False, 105: True}

    def test_run_with_missing_inputs(self, solver_backend):
        with SolverSession(*solver_backend.address) as solver:
            solver.send_node_table(SCORES)
            with pytest.raises(ValidationError, match="-e, -lambda, -a, -FDR"):
                solver.run()
        assert (MessageType.RUN, None) not in solver_backend.requests()

    def test_output_never_registered(self, solver_backend):
        with SolverSession(*solver_backend.address) as solver:
            solver.send_node_table(SCORES)
            solver.send_edge_table(EDGES)
            solver.send_lambda(0.35)
            solver.send_a(0.19)
            solver.send_fdr(0.01)
            solver.run()
            with pytest.raises(InputStateError, match="never registered"):
                solver.retrieve_results()

    def test_malformed_output(self):
        with MockBackend.solver("#label\tscore\n101\t3.2\textra\n") as mock:
            solver = SolverSession(*mock.address)
            with pytest.raises(OutputParseError, match="3 fields"):
                solver.solve(SCORES, EDGES, lambda_=0.35, a=0.19, fdr=0.01)
            assert solver.connection.is_closed

    def test_from_config(self, solver_backend):
        host, port = solver_backend.address
        config = SolverConfig(host=host, port=port, fdr=0.05)
        with SolverSession.from_config(config) as solver:
            membership = solver.solve(
                SCORES, EDGES, lambda_=0.35, a=0.19, fdr=config.fdr
            )
        assert membership[101]
        received = {(m.type, m.name): m.payload for m in solver_backend.received}
        assert received[(MessageType.PARAMETER, "-FDR")] == b"0.05"
