import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from photopeak_fit import synthetic_histogram

GAUSS_988 = [600.0, 0.05, 1000.0, 988.0, 0.8]
TWO_PEAKS = [600.0, 0.05, 1000.0, 985.0, 0.5, 500.0, 995.0, 0.5]


@pytest.fixture
def gaussian_988_data():
    """Noise-free Gaussian line at 988 keV sampled at integer energies 980-1000."""
    return synthetic_histogram("gaussian", GAUSS_988, np.arange(980, 1001))


@pytest.fixture
def fine_energies():
    return np.arange(970.0, 1010.0 + 0.125, 0.25)
