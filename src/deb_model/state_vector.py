# state_vector.py
# single source of truth for the order of states in the ODE vector y

from enum import IntEnum
import numpy as np

from .parameters import DEBParameters, DEFAULT_V0, maximum_reserve_density
from .forcing import evaluate


class StateIx(IntEnum):
    RESERVE = 0    # E, energy
    STRUCTURE = 1  # V, volume


N_STATES = max(StateIx) + 1  # assumes enum values are 0..N-1


def get_initial_state(
    params: DEBParameters,
    V0: float = DEFAULT_V0,
    t0: float = 0.0,
) -> np.ndarray:
    """
    Initial state with reserve seeded at the steady-state reserve density
    f(t0) * p_Am / v for the given structure V0.
    """
    y0 = np.zeros(N_STATES, dtype=float)

    f0 = evaluate(params.f, t0)
    y0[StateIx.RESERVE] = f0 * maximum_reserve_density(params) * V0
    y0[StateIx.STRUCTURE] = V0
    return y0
