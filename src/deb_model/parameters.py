# parameters.py
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Callable, Union
import math

FeedingResponse = Union[float, Callable[[float], float]]


class ParameterDomainError(ValueError):
    """Raised when parameters or initial conditions leave the physical domain."""


@dataclass(frozen=True)
class DEBParameters:
    p_Am: float = 100.0 # (J/cm^2/d) Surface-area-specific maximum assimilation rate
    E_G: float = 28.0 # (J/cm^3) Volume-specific cost of structure
    v: float = 0.02 # (cm/d) Energy conductance
    p_M: float = 18.0 # (J/cm^3/d) Volume-specific somatic maintenance rate
    f: FeedingResponse = 1.0 # (-) Scaled functional response, constant or f(t)


# Rate parameters that must be strictly positive
RATE_PARAMETERS: tuple[str, ...] = ("p_Am", "E_G", "v", "p_M")

# Initial structural volume used by the examples and the explorer
DEFAULT_V0: float = 0.01 # (cm^3)


def get_default_parameters() -> DEBParameters:
    """
    Return a DEBParameters object with all default (typical) values.
    """
    return DEBParameters()


def parameter_names() -> list[str]:
    return [fld.name for fld in fields(DEBParameters)]


def replace_parameters(params: DEBParameters, **changes) -> DEBParameters:
    """
    Return a copy of params with the given fields replaced.

    Unknown field names raise ParameterDomainError rather than TypeError so
    callers building changes from user input get a single error type.
    """
    unknown = set(changes) - set(parameter_names())
    if unknown:
        raise ParameterDomainError(f"Unknown DEB parameter(s): {sorted(unknown)}")
    return replace(params, **changes)


def validate_parameters(params: DEBParameters) -> None:
    """
    Check that every rate parameter is a finite positive number and that a
    constant feeding response lies in [0, 1].

    Raises:
        ParameterDomainError: on the first violation found.
    """
    for name in RATE_PARAMETERS:
        value = getattr(params, name)
        if value is None or not math.isfinite(value):
            raise ParameterDomainError(f"{name} must be finite, got {value!r}")
        if value <= 0.0:
            raise ParameterDomainError(f"{name} must be > 0, got {value!r}")

    if callable(params.f):
        return
    f = params.f
    if f is None or not math.isfinite(f):
        raise ParameterDomainError(f"f must be finite, got {f!r}")
    if not 0.0 <= f <= 1.0:
        raise ParameterDomainError(f"f must lie in [0, 1], got {f!r}")


def validate_initial_state(reserve0: float, structure0: float) -> None:
    if not (math.isfinite(reserve0) and math.isfinite(structure0)):
        raise ParameterDomainError(
            f"Initial state must be finite, got reserve={reserve0!r}, structure={structure0!r}"
        )
    if structure0 <= 0.0:
        raise ParameterDomainError(f"Initial structure must be > 0, got {structure0!r}")
    if reserve0 < 0.0:
        raise ParameterDomainError(f"Initial reserve must be >= 0, got {reserve0!r}")


def maximum_reserve_density(params: DEBParameters) -> float:
    """[E_m] = p_Am / v, the reserve density held at f = 1."""
    return params.p_Am / params.v
