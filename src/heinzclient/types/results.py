"""Result types produced by completed sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from mashumaro import DataClassDictMixin


@dataclass(frozen=True)
class NotFitted:
    """No BUM model has been fitted yet in this session."""

    def __bool__(self):
        return False


@dataclass(frozen=True)
class Fitted(DataClassDictMixin):
    """Parameters of a fitted beta-uniform mixture (BUM) model.

    Attributes
    ----------
    lambda_ : float
        Mixture parameter (λ).
    a : float
        Shape parameter (a).
    """

    lambda_: float
    a: float

    def column_values(self, pvalue_column: str) -> dict[str, float]:
        """Values keyed the way host tables store them, e.g. 'pval.BUM.lambda'."""
        return {
            f"{pvalue_column}.BUM.lambda": self.lambda_,
            f"{pvalue_column}.BUM.a": self.a,
        }


FittingResult = Union[NotFitted, Fitted]

NOT_FITTED = NotFitted()


@dataclass(kw_only=True)
class WorkflowResult(DataClassDictMixin):
    """Everything a fit-then-solve workflow produced."""

    fit: Fitted
    membership: dict[int, bool] = field(default_factory=dict)
    plot_png: Optional[bytes] = None

    @property
    def module(self) -> list[int]:
        """Keys of the entities selected by the solver, sorted."""
        return sorted(key for key, member in self.membership.items() if member)
