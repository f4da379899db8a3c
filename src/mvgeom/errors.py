"""
Exception types for mvgeom.

Solver and metric failures never raise: they reduce to an empty candidate
list or an infinite residual. These exceptions are for the operations that
have no such neutral result (projection algebra, parameterization,
coordinate conditioning).
"""

from __future__ import annotations


class MultiviewError(Exception):
    """Base class for all mvgeom errors."""


class DegenerateInput(MultiviewError, ValueError):
    """
    A sample is geometrically degenerate (coincident points, zero spread).
    """


class NumericalSingularity(MultiviewError, ArithmeticError):
    """
    A required inverse, division or factorization is singular.

    Raised instead of returning inf/NaN so callers can skip the candidate.
    """


class InvalidParameterization(MultiviewError, ValueError):
    """
    A parameter vector does not describe a valid rotation pair.
    """
