"""
Argument checks shared by the clustering entry points.
All of them run before any clustering state is allocated.
"""
from numbers import Integral, Real

from densityscan.core.exceptions import InvalidArgumentError


def check_positive_real(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real) or not value > 0:
        raise InvalidArgumentError(f"{name} {value!r} must be a positive real value.")
    return float(value)


def check_positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral) or value < 1:
        raise InvalidArgumentError(f"{name} {value!r} must be a positive integer.")
    return int(value)
