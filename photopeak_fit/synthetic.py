# File: photopeak_fit/synthetic.py
import numpy as np

from photopeak_fit.analysis.validation import validate_request
from photopeak_fit.models.peak_model import build_model


def synthetic_histogram(shape, params, energies, peak_count=None, noise=False, seed=None):
    """
    Builds an [energy, counts] histogram from the photopeak model.

    Args:
        shape: peak shape of the generating model.
        params: true parameters, length 3*peak_count + 2.
        energies: energies (bin centres) to sample.
        peak_count: defaults to the count implied by len(params).
        noise: draw Poisson counts around the model when True.
        seed: seed for numpy's default_rng.
    """
    if peak_count is None:
        peak_count = max((len(params) - 2) // 3, 1)
    peak_count = validate_request(params, peak_count)
    energies = np.asarray(energies, dtype=float)
    counts = build_model(shape, peak_count)(energies, np.asarray(params, dtype=float))
    counts = counts * np.ones_like(energies)
    if noise:
        rng = np.random.default_rng(seed)
        counts = rng.poisson(np.clip(counts, 0, None)).astype(float)
    return np.column_stack([energies, counts])
