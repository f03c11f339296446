import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from deb_model.parameters import get_default_parameters


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture
def params():
    return get_default_parameters()


@pytest.fixture
def times():
    return np.linspace(0.0, 5000.0, 1000)
