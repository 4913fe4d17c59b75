"""Local stand-ins for the analysis backends, for tests and examples."""

from .mock import MockBackend, fitter_report

__all__ = ["MockBackend", "fitter_report"]
