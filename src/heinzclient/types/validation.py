"""Validation of caller supplied inputs.

Everything here runs before any network traffic, so a bad value never leaves
a backend holding half a session. All failures raise `ValidationError`.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np
import numpy.typing as npt

from .errors import ValidationError


def _is_int_key(key: Any) -> bool:
    return isinstance(key, (int, np.integer)) and not isinstance(key, (bool, np.bool_))


def validate_port(port: int) -> None:
    if not _is_int_key(port) or not 0 < port < 65536:
        raise ValidationError(f"Invalid port number: {port!r}.")


def validate_timeout(timeout: Optional[float]) -> None:
    if timeout is not None and not timeout > 0:
        raise ValidationError(f"Timeout must be positive or None, got {timeout!r}.")


def validate_starts(starts: int) -> None:
    """Number of starts for model fitting must be a positive integer."""
    if not _is_int_key(starts):
        raise ValidationError(f"Number of starts must be an integer, got {starts!r}.")
    if starts <= 0:
        raise ValidationError(f"Number of starts must be positive, got {starts}.")


def validate_open_unit_interval(value: Optional[float], name: str) -> float:
    """Check `value` lies in the open interval (0, 1) and return it as a float."""
    if value is None:
        raise ValidationError(f"No value given for {name}.")
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}.") from e
    if not 0.0 < value < 1.0:
        raise ValidationError(f"{name} parameter out of range (0, 1): {value}.")
    return value


def validate_pvalues(pvalues: Sequence[float]) -> npt.NDArray[np.float64]:
    """Check an ordered sequence of p-values.

    Parameters
    ----------
    pvalues : Sequence[float]
        The p-values, in the order they should be sent.

    Returns
    -------
    np.ndarray
        The p-values as a 1D float array, order preserved.

    Raises
    ------
    ValidationError
        If the sequence is empty, a value is missing (None), not a number, or
        outside [0, 1].
    """
    if pvalues is None:
        raise ValidationError("No p-values given.")
    values = list(pvalues)
    if not values:
        raise ValidationError("No p-values given.")
    for i, p in enumerate(values):
        if p is None:
            raise ValidationError(f"p-value at position {i} missing.")
    try:
        arr = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"p-values must be numbers: {e}") from e
    if arr.ndim != 1:
        raise ValidationError(f"p-values must be one dimensional, got shape {arr.shape}.")
    bad = np.flatnonzero(~((arr >= 0.0) & (arr <= 1.0)))  # NaN fails both
    if bad.size:
        i = int(bad[0])
        raise ValidationError(f"Invalid p-value at position {i}: {values[i]}.")
    return arr


def validate_score_table(scores: Mapping[int, float]) -> list[tuple[int, float]]:
    """Check a node table mapping integer keys to scores.

    Only the shape of the table is checked, not the range of the scores.

    Returns
    -------
    list[tuple[int, float]]
        The (key, score) rows in the table's iteration order.
    """
    if not scores:
        raise ValidationError("No node scores given.")
    rows = []
    for key, score in scores.items():
        if not _is_int_key(key):
            raise ValidationError(f"Node key must be an integer, got {key!r}.")
        if score is None:
            raise ValidationError(f"Score for node {key} missing.")
        try:
            rows.append((int(key), float(score)))
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Score for node {key} must be a number, got {score!r}."
            ) from e
    return rows


def validate_pvalue_table(scores: Mapping[int, float]) -> list[tuple[int, float]]:
    """As `validate_score_table`, additionally requiring every score in [0, 1]."""
    rows = validate_score_table(scores)
    for key, p in rows:
        if math.isnan(p) or not 0.0 <= p <= 1.0:
            raise ValidationError(f"Invalid p-value for node {key}: {p}.")
    return rows


def validate_edges(edges: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    """Check an edge list is made of pairs of integer node keys."""
    if edges is None:
        raise ValidationError("No edge list given.")
    pairs = []
    for edge in edges:
        try:
            source, target = edge
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Edge must be a (source, target) pair: {edge!r}.") from e
        if not (_is_int_key(source) and _is_int_key(target)):
            raise ValidationError(f"Edge endpoints must be integer keys: {edge!r}.")
        pairs.append((int(source), int(target)))
    return pairs
