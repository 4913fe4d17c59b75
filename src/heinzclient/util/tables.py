# -*- coding: utf-8 -*-
"""
Serialisation of session inputs into the text files the backends read.

All outputs are ASCII encoded bytes, ready to be used as an `INPUT_FILE`
payload or a `PARAMETER` value.
"""

from __future__ import annotations

import io
from typing import Iterable

import numpy as np
import numpy.typing as npt

NODE_TABLE_HEADER = "#node\tpval\n"
EDGE_TABLE_HEADER = "#source\ttarget\n"


def format_pvalue_file(pvalues: npt.ArrayLike) -> bytes:
    """One p-value per line with 15 significant digits, order preserved."""
    buf = io.BytesIO()
    np.savetxt(buf, np.asarray(pvalues, dtype=np.float64).reshape(-1), fmt="%.15g")
    return buf.getvalue()


def format_node_table(rows: Iterable[tuple[int, float]]) -> bytes:
    """Tab separated node table: integer key, score."""
    lines = [NODE_TABLE_HEADER]
    lines.extend(f"{key:d}\t{score:g}\n" for key, score in rows)
    return "".join(lines).encode("ascii")


def format_edge_table(pairs: Iterable[tuple[int, int]]) -> bytes:
    """Tab separated edge table: source key, target key."""
    lines = [EDGE_TABLE_HEADER]
    lines.extend(f"{source:d}\t{target:d}\n" for source, target in pairs)
    return "".join(lines).encode("ascii")


def format_float_parameter(value: float) -> str:
    # shortest repr that round-trips, e.g. '0.01'
    return repr(float(value))


def format_int_parameter(value: int) -> str:
    return str(int(value))
