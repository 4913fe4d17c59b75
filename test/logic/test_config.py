"""Tests for configuration types, input validation and input file formatting."""

import numpy as np
import pytest

from heinzclient.types import (
    FittingConfig,
    SolverConfig,
    ValidationError,
    WorkflowConfig,
)
from heinzclient.types.validation import (
    validate_edges,
    validate_pvalue_table,
    validate_pvalues,
    validate_score_table,
    validate_starts,
)
from heinzclient.util import (
    DEFAULT_FDR,
    DEFAULT_FITTING_PORT,
    DEFAULT_SOLVER_PORT,
    DEFAULT_STARTS,
    format_edge_table,
    format_float_parameter,
    format_node_table,
    format_pvalue_file,
)


def test_defaults():
    config = WorkflowConfig()
    assert config.fit_bum
    assert config.fitting.port == DEFAULT_FITTING_PORT
    assert config.fitting.starts == DEFAULT_STARTS
    assert not config.fitting.plot
    assert config.solver.port == DEFAULT_SOLVER_PORT
    assert config.solver.fdr == DEFAULT_FDR
    assert config.solver.timeout is None


def test_from_dict():
    config = WorkflowConfig.from_dict(
        {
            "fit_bum": False,
            "lambda_": 0.5,
            "a": 0.25,
            "solver": {"host": "heinz.example.org", "port": 9101, "fdr": 0.1},
        }
    )
    assert config.lambda_ == 0.5
    assert config.solver.host == "heinz.example.org"
    assert config.solver.port == 9101
    assert config.fitting == FittingConfig()
    assert WorkflowConfig.from_dict(config.to_dict()) == config


@pytest.mark.parametrize(
    "kwargs",
    [
        {"fdr": 0.0},
        {"fdr": 1.0},
        {"port": 0},
        {"port": 70000},
        {"timeout": 0},
        {"timeout": -1.0},
    ],
)
def test_bad_solver_config(kwargs):
    with pytest.raises(ValidationError):
        SolverConfig(**kwargs)


def test_bad_fitting_config():
    with pytest.raises(ValidationError):
        FittingConfig(starts=0)


def test_given_parameters_required_without_fitting():
    with pytest.raises(ValidationError, match="lambda"):
        WorkflowConfig(fit_bum=False, a=0.3)
    with pytest.raises(ValidationError, match="a parameter out of range"):
        WorkflowConfig(fit_bum=False, lambda_=0.3, a=1.0)
    # ignored when fitting
    WorkflowConfig(fit_bum=True, lambda_=5.0)


def test_validate_pvalues():
    arr = validate_pvalues((0.0, 1.0, np.float32(0.5)))
    assert arr.tolist() == [0.0, 1.0, 0.5]
    with pytest.raises(ValidationError, match="position 1"):
        validate_pvalues([0.2, 1.0001])
    with pytest.raises(ValidationError, match="missing"):
        validate_pvalues([None])
    with pytest.raises(ValidationError):
        validate_pvalues([[0.1, 0.2]])


@pytest.mark.parametrize("starts", [0, -1, 2.5, True, "10"])
def test_validate_starts(starts):
    with pytest.raises(ValidationError):
        validate_starts(starts)


def test_validate_tables():
    assert validate_score_table({np.int64(3): np.float64(0.5)}) == [(3, 0.5)]
    assert validate_score_table({3: 12.0}) == [(3, 12.0)]
    with pytest.raises(ValidationError):
        validate_pvalue_table({3: 12.0})
    with pytest.raises(ValidationError):
        validate_score_table({True: 0.5})
    assert validate_edges([(1, 2), [3, 4]]) == [(1, 2), (3, 4)]
    assert validate_edges(iter([])) == []


def test_input_files():
    assert format_pvalue_file([0.5, 1e-10, 1 / 3]) == (
        b"0.5\n1e-10\n0.333333333333333\n"
    )
    assert format_node_table([(7, 0.25)]) == b"#node\tpval\n7\t0.25\n"
    assert format_node_table([]) == b"#node\tpval\n"
    assert format_edge_table([(7, 8)]) == b"#source\ttarget\n7\t8\n"
    assert format_float_parameter(np.float64(0.01)) == "0.01"
    assert format_float_parameter(1) == "1.0"
