# forcing.py

from __future__ import annotations
from typing import Callable
import math

from .parameters import FeedingResponse, ParameterDomainError

# Length of the seasonal cycle used by the growth examples
DAYS_PER_YEAR = 365.0


def is_time_varying(f: FeedingResponse) -> bool:
    return callable(f)


def evaluate(f: FeedingResponse, t: float) -> float:
    """Value of the scaled functional response at time t."""
    if callable(f):
        return f(t)
    return f


def constant_forcing(value: float) -> Callable[[float], float]:
    """Constant feeding response wrapped as a function of time."""
    if not 0.0 <= value <= 1.0:
        raise ParameterDomainError(f"Constant forcing must lie in [0, 1], got {value!r}")

    def f(t: float) -> float:
        return value

    return f


def seasonal_forcing(
    mean: float = 0.8,
    amplitude: float = 0.1,
    period: float = DAYS_PER_YEAR,
    phase: float = 0.0,
) -> Callable[[float], float]:
    """
    Sinusoidal seasonal feeding response:

        f(t) = amplitude * sin(2*pi*(t - phase)/period) + mean

    The defaults give a yearly oscillation between 0.7 and 0.9.
    """
    if period <= 0.0:
        raise ParameterDomainError(f"period must be > 0, got {period!r}")
    if mean - abs(amplitude) < 0.0 or mean + abs(amplitude) > 1.0:
        raise ParameterDomainError(
            f"Seasonal forcing leaves [0, 1]: mean={mean}, amplitude={amplitude}"
        )

    omega = 2.0 * math.pi / period

    def f(t: float) -> float:
        return amplitude * math.sin(omega * (t - phase)) + mean

    return f
