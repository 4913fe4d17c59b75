"""
Fit-then-solve workflow.

Fits a BUM model to the node p-values (unless the parameters are given), then
runs Heinz with the fitted parameters. Sessions run one after the other, each
closed before the next starts.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from loguru import logger

from heinzclient.types import Fitted, WorkflowConfig, WorkflowResult
from heinzclient.types.validation import validate_edges, validate_pvalue_table

from .fitting import FittingSession
from .solver import SolverSession


def run_workflow(
    pvalues: Mapping[int, float],
    edges: Iterable[tuple[int, int]],
    config: Optional[WorkflowConfig] = None,
) -> WorkflowResult:
    """Detect a module in a network whose nodes carry p-values.

    Parameters
    ----------
    pvalues : Mapping[int, float]
        Node key to p-value. Every node must have a p-value in [0, 1].
    edges : Iterable[tuple[int, int]]
        Edges as (source, target) node keys.
    config : WorkflowConfig | None, optional
        Backends and parameters, by default WorkflowConfig()

    Returns
    -------
    WorkflowResult
        The BUM parameters used, module membership per node, and the fitting
        plot if one was requested.

    Raises
    ------
    ValidationError
        If a p-value is missing or out of range (before any traffic).
    CommsError
        If either backend fails; the failing session is closed and nothing
        is returned.
    """
    if config is None:
        config = WorkflowConfig()
    rows = validate_pvalue_table(pvalues)
    edges = validate_edges(edges)

    plot_png = None
    if config.fit_bum:
        logger.info("Fitting BUM model to {} p-values.", len(rows))
        with FittingSession.from_config(config.fitting) as fitter:
            fit = fitter.fit(
                [p for _, p in rows],
                starts=config.fitting.starts,
                plot=config.fitting.plot,
            )
            if config.fitting.plot:
                plot_png = fitter.get_plot_png()
    else:
        fit = Fitted(lambda_=config.lambda_, a=config.a)
        logger.info("Using given BUM parameters: lambda={}, a={}", fit.lambda_, fit.a)

    with SolverSession.from_config(config.solver) as solver:
        membership = solver.solve(
            dict(rows), edges, lambda_=fit.lambda_, a=fit.a, fdr=config.solver.fdr
        )

    result = WorkflowResult(fit=fit, membership=membership, plot_png=plot_png)
    logger.info("Workflow complete, module of {} nodes.", len(result.module))
    return result
