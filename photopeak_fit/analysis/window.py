# File: photopeak_fit/analysis/window.py
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def _as_histogram(data):
    if isinstance(data, pd.DataFrame):
        data = data.iloc[:, :2].to_numpy()
    arr = np.asarray(data, dtype=float)
    if arr.ndim != 2 or arr.shape[1] < 2:
        raise ValueError(f"data must be a two-column [energy, counts] table, got shape {arr.shape}")
    return arr


def select_window(data, xlow, xhigh):
    """
    Selects the histogram rows with xlow < energy < xhigh.

    Args:
        data: [energy, counts] table (array, nested list or DataFrame).
        xlow, xhigh: exclusive window edges.

    Returns: (x, y) arrays, possibly empty.
    """
    hist = _as_histogram(data)
    energy = hist[:, 0]
    mask = (energy > xlow) & (energy < xhigh)
    x = energy[mask]
    y = hist[mask, 1]
    logger.debug("Window (%g, %g): %d of %d rows selected", xlow, xhigh, x.size, energy.size)
    return x, y


def load_histogram(path, energy_col=None, counts_col=None, **read_kwargs):
    """
    Reads an [energy, counts] histogram from a CSV file.

    energy_col / counts_col select columns by name; by default the first two
    columns are used. Extra keyword arguments go to pandas.read_csv.
    """
    df = pd.read_csv(path, **read_kwargs)
    if energy_col is None and counts_col is None:
        if df.shape[1] < 2:
            raise ValueError(f"{path}: expected at least two columns, found {df.shape[1]}")
        cols = list(df.columns[:2])
    else:
        cols = [energy_col if energy_col is not None else df.columns[0],
                counts_col if counts_col is not None else df.columns[1]]
        missing = [c for c in cols if c not in df.columns]
        if missing:
            raise ValueError(f"{path}: column(s) not found: {missing}")
    hist = df[cols].apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)
    n_bad = int(np.count_nonzero(~np.isfinite(hist).all(axis=1)))
    if n_bad:
        logger.warning("%s: dropping %d non-numeric row(s)", path, n_bad)
        hist = hist[np.isfinite(hist).all(axis=1)]
    logger.info("Loaded %d histogram rows from %s", len(hist), path)
    return hist
