"""Parsers for the textual output artifacts of the backends."""

from __future__ import annotations

import math
from typing import Union

from heinzclient.types import Fitted, OutputParseError

LAMBDA_LABEL = "Mixture parameter (lambda):"
A_LABEL = "shape parameter (a):"


def _as_text(output: Union[str, bytes]) -> str:
    if isinstance(output, bytes):
        return output.decode("ascii", errors="replace")
    return output


def parse_labelled_value(text: str, label: str) -> float:
    """Find the single line starting with `label` and parse the rest as a float.

    Raises
    ------
    OutputParseError
        If no line or more than one line carries the label, or its value is
        not a number.
    """
    values = [
        line[len(label) :].strip()
        for line in text.splitlines()
        if line.startswith(label)
    ]
    if not values:
        raise OutputParseError(f"No value for '{label}' found in output")
    if len(values) > 1:
        raise OutputParseError(f"Multiple '{label}' lines found in output")
    try:
        return float(values[0])
    except ValueError as e:
        raise OutputParseError(f"Bad value for '{label}': {values[0]!r}") from e


def parse_fitting_report(report: Union[str, bytes]) -> Fitted:
    """Extract the fitted BUM parameters from the fitter's report.

    Each of the lines

        Mixture parameter (lambda): <value>
        shape parameter (a): <value>

    must appear exactly once, with a value in the open interval (0, 1).
    """
    text = _as_text(report)
    return Fitted(
        lambda_=_fitted_parameter(text, LAMBDA_LABEL),
        a=_fitted_parameter(text, A_LABEL),
    )


def _fitted_parameter(text: str, label: str) -> float:
    value = parse_labelled_value(text, label)
    if not 0.0 < value < 1.0:
        raise OutputParseError(f"Value for '{label}' out of range (0, 1): {value}")
    return value


def parse_module_result(output: Union[str, bytes]) -> dict[int, bool]:
    """Read the solver's node score file into a membership map.

    Lines starting with '#' and blank lines are skipped. Every other line must
    be `<integer key> <score>`, whitespace separated. A node belongs to the
    module unless its score is NaN.

    Raises
    ------
    OutputParseError
        If a line does not have exactly two fields, or they do not parse.
    """
    membership: dict[int, bool] = {}
    for lineno, line in enumerate(_as_text(output).splitlines(), start=1):
        if line.startswith("#") or not line.strip():
            continue
        fields = line.split()
        if len(fields) != 2:
            raise OutputParseError(
                f"Line {lineno} of module output has {len(fields)} fields, "
                f"expected 2: {line!r}"
            )
        try:
            key = int(fields[0])
            score = float(fields[1])
        except ValueError as e:
            raise OutputParseError(f"Line {lineno} of module output: {e}") from e
        membership[key] = not math.isnan(score)
    return membership
