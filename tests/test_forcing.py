import numpy as np
import pytest

from deb_model.forcing import constant_forcing, evaluate, is_time_varying, seasonal_forcing
from deb_model.parameters import ParameterDomainError


def test_seasonal_forcing_range_and_period():
    f = seasonal_forcing()
    t = np.linspace(0.0, 730.0, 2001)
    values = np.array([f(ti) for ti in t])
    assert values.min() == pytest.approx(0.7, abs=1e-4)
    assert values.max() == pytest.approx(0.9, abs=1e-4)
    assert f(0.0) == pytest.approx(0.8)
    assert f(365.0 / 4) == pytest.approx(0.9)
    assert f(100.0) == pytest.approx(f(465.0))


def test_seasonal_forcing_must_stay_in_unit_interval():
    with pytest.raises(ParameterDomainError):
        seasonal_forcing(mean=0.95, amplitude=0.1)
    with pytest.raises(ParameterDomainError):
        seasonal_forcing(period=0.0)


def test_constant_forcing():
    f = constant_forcing(0.6)
    assert f(0.0) == f(1234.5) == 0.6
    with pytest.raises(ParameterDomainError):
        constant_forcing(1.2)


def test_evaluate_resolves_both_forms():
    assert evaluate(0.3, 10.0) == 0.3
    assert evaluate(lambda t: t / 10.0, 5.0) == pytest.approx(0.5)
    assert not is_time_varying(0.3)
    assert is_time_varying(seasonal_forcing())
