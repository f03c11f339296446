import numpy as np
import pytest

from deb_model.parameters import ParameterDomainError
from deb_model.simulation import Trajectory
from deb_model.sweep import summarize_trajectory, sweep_parameter, time_to_fraction

T = np.linspace(0.0, 2000.0, 200)


def test_sweep_over_maintenance(params):
    values = [12.0, 18.0, 24.0]
    times, trajs, summary = sweep_parameter("p_M", values, base=params, times=T, progress=False)

    np.testing.assert_array_equal(times, T)
    assert len(trajs) == 3
    assert all(traj.success for traj in trajs)
    assert list(summary["value"]) == values
    assert summary["success"].all()
    assert np.all(np.diff(summary["ultimate_structure"]) < 0)
    np.testing.assert_allclose(summary["ultimate_structure"], [(100.0 / pm) ** 3 for pm in values])


def test_sweep_initial_structure(params):
    _, trajs, summary = sweep_parameter("V0", [0.01, 1.0], base=params, times=T, progress=False)
    assert trajs[0].structure[0] == 0.01
    assert trajs[1].structure[0] == 1.0
    assert summary["final_structure"].iloc[1] > summary["final_structure"].iloc[0]


def test_sweep_records_invalid_values(params):
    _, trajs, summary = sweep_parameter("v", [-0.02, 0.02], base=params, times=T, progress=False)
    assert trajs[0] is None
    assert summary["status"].iloc[0] == "invalid_parameters"
    assert not summary["success"].iloc[0]
    assert summary["success"].iloc[1]


def test_sweep_unknown_parameter(params):
    with pytest.raises(ParameterDomainError):
        sweep_parameter("kappa", [0.5], base=params, times=T, progress=False)
    with pytest.raises(ParameterDomainError):
        sweep_parameter("p_M", [], base=params, times=T, progress=False)


def test_sweep_parallel_matches_sequential(params):
    _, _, seq = sweep_parameter("E_G", [10.0, 40.0], base=params, times=T, progress=False)
    _, _, par = sweep_parameter(
        "E_G", [10.0, 40.0], base=params, times=T, n_jobs=2, backend="threading", progress=False
    )
    np.testing.assert_allclose(par["final_structure"], seq["final_structure"])


def test_time_to_fraction_interpolates():
    traj = Trajectory(t=np.array([0.0, 1.0, 2.0]), reserve=np.ones(3), structure=np.array([1.0, 3.0, 5.0]))
    assert time_to_fraction(traj, 2.0) == pytest.approx(0.5)
    assert time_to_fraction(traj, 0.5) == 0.0
    assert np.isnan(time_to_fraction(traj, 6.0))


def test_summary_growth_times_are_ordered(params):
    _, trajs, _ = sweep_parameter("p_M", [18.0], base=params, times=np.linspace(0.0, 5000.0, 1000), progress=False)
    row = summarize_trajectory(trajs[0], params)
    assert row["t_half"] < row["t_90"] < 5000.0
    assert row["fraction_of_ultimate"] == pytest.approx(1.0, abs=0.01)
