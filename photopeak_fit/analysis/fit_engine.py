# File: photopeak_fit/analysis/fit_engine.py
import logging
from dataclasses import dataclass

import numpy as np
from scipy import linalg

from photopeak_fit.config import SolverOptions
from photopeak_fit.errors import BoundsInfeasibleError, InsufficientDataError, SolverError

logger = logging.getLogger(__name__)

EPS = np.finfo(float).eps


@dataclass
class SolverResult:
    params: np.ndarray
    jacobian: np.ndarray    # d model / d params at `params`, shape (m, k)
    residuals: np.ndarray   # y - model(x, params)
    ssr: float
    iterations: int


def resolve_bounds(lower_bounds, upper_bounds, n_params):
    """
    Returns (lower, upper) float arrays of length n_params. Missing bounds
    become -inf / +inf.
    """
    lb = np.full(n_params, -np.inf) if lower_bounds is None else np.asarray(lower_bounds, dtype=float)
    ub = np.full(n_params, np.inf) if upper_bounds is None else np.asarray(upper_bounds, dtype=float)
    if lb.shape != (n_params,) or ub.shape != (n_params,):
        raise ValueError(f"bounds must have shape ({n_params},), got {lb.shape} and {ub.shape}")
    if np.isnan(lb).any() or np.isnan(ub).any():
        raise BoundsInfeasibleError("bounds must not contain NaN")
    bad = np.nonzero(lb > ub)[0]
    if bad.size:
        pairs = ", ".join(f"p[{i}]: {lb[i]} > {ub[i]}" for i in bad)
        raise BoundsInfeasibleError(f"lower bound exceeds upper bound ({pairs})")
    return lb, ub


def numerical_jacobian(func, x, p, lower, upper, rel_step):
    """
    Finite-difference Jacobian of func(x, p) with respect to p.

    Central differences where both probes stay inside the bounds, one-sided
    where only one of them does.
    """
    p = np.asarray(p, dtype=float)
    f0 = np.asarray(func(x, p), dtype=float)
    J = np.empty((f0.size, p.size))
    for j in range(p.size):
        h = rel_step * max(abs(p[j]), 1.0)
        fwd_ok = p[j] + h <= upper[j]
        bwd_ok = p[j] - h >= lower[j]
        p_hi = p.copy()
        p_lo = p.copy()
        if fwd_ok and not bwd_ok:
            p_hi[j] += h
            J[:, j] = (func(x, p_hi) - f0) / h
        elif bwd_ok and not fwd_ok:
            p_lo[j] -= h
            J[:, j] = (f0 - func(x, p_lo)) / h
        else:
            # both probes allowed, or the interval is narrower than 2h
            p_hi[j] += h
            p_lo[j] -= h
            J[:, j] = (func(x, p_hi) - func(x, p_lo)) / (2.0 * h)
    return J


def _ssr(r):
    return float(r @ r) if np.all(np.isfinite(r)) else np.inf


def levenberg_marquardt(func, x, y, p0, lower_bounds=None, upper_bounds=None, options=None):
    """
    Bounded Levenberg-Marquardt minimisation of sum((y - func(x, p))**2).

    Args:
        func: model f(x, p) evaluated element-wise over x.
        x, y: data to fit.
        p0: initial parameters (projected into the bounds if outside).
        lower_bounds, upper_bounds: optional per-parameter bounds.
        options: SolverOptions, defaults when None.

    Returns: SolverResult at the converged parameters.
    """
    if options is None:
        options = SolverOptions()

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError("x and y must have the same shape")
    p = np.asarray(p0, dtype=float).copy()
    k = p.size
    m = y.size
    lb, ub = resolve_bounds(lower_bounds, upper_bounds, k)

    if m < k:
        raise InsufficientDataError(
            f"{m} data point(s) in the fit window for {k} parameters; "
            "the problem has no degrees of freedom"
        )

    p_clipped = np.clip(p, lb, ub)
    if not np.array_equal(p_clipped, p):
        logger.debug("Initial parameters projected into bounds: %s -> %s", p, p_clipped)
        p = p_clipped

    rel_step = options.diff_step if options.diff_step is not None else EPS ** (1.0 / 3.0)
    min_lambda = 1.0 / options.max_lambda

    r = y - func(x, p)
    ssr = _ssr(r)
    if not np.isfinite(ssr):
        raise SolverError(f"model is not finite at the initial parameters {p}")
    J = numerical_jacobian(func, x, p, lb, ub, rel_step)

    lam = options.initial_lambda
    converged = ssr == 0.0
    iterations = 0

    while not converged and iterations < options.max_iter:
        iterations += 1
        if not np.all(np.isfinite(J)):
            raise SolverError(f"Jacobian is not finite at parameters {p}")

        # --- 1. Active set: parameters pinned at a bound with the descent pointing outwards ---
        g = J.T @ r
        active = ((p <= lb) & (g < 0)) | ((p >= ub) & (g > 0))
        free = ~active
        if np.max(np.abs(g[free]), initial=0.0) <= options.g_tol:
            converged = True
            break

        # --- 2. Damped step on the free parameters: (JtJ + lam*D) delta = Jt r ---
        Jf = J[:, free]
        if options.scale_diagonal:
            d = np.clip(np.sum(Jf**2, axis=0), options.min_diagonal, options.max_diagonal)
        else:
            d = np.ones(Jf.shape[1])
        A = np.vstack([Jf, np.diag(np.sqrt(lam * d))])
        b = np.concatenate([r, np.zeros(Jf.shape[1])])
        delta = np.zeros(k)
        delta[free] = linalg.lstsq(A, b)[0]

        # --- 3. Project, then accept or reject ---
        p_new = np.clip(p + delta, lb, ub)
        step = p_new - p
        small_step = np.all(np.abs(step) <= options.x_tol * (options.x_tol + np.abs(p)))
        r_new = y - func(x, p_new)
        ssr_new = _ssr(r_new)

        if ssr_new < ssr:
            rel_reduction = (ssr - ssr_new) / ssr
            p, r, ssr = p_new, r_new, ssr_new
            J = numerical_jacobian(func, x, p, lb, ub, rel_step)
            lam = max(lam * options.lambda_decrease, min_lambda)
            logger.debug("iter %d: accepted, ssr=%.6g, lambda=%.3g", iterations, ssr, lam)
            converged = ssr == 0.0 or rel_reduction <= options.f_tol or small_step
        else:
            lam = min(lam * options.lambda_increase, options.max_lambda)
            logger.debug("iter %d: rejected (ssr_new=%.6g), lambda=%.3g", iterations, ssr_new, lam)
            converged = small_step

    if not converged:
        raise SolverError(
            f"Levenberg-Marquardt did not converge within {options.max_iter} iterations "
            f"(ssr={ssr:.6g}, lambda={lam:.3g})"
        )

    logger.debug("Converged after %d iterations, ssr=%.6g", iterations, ssr)
    return SolverResult(
        params=p,
        jacobian=J,
        residuals=r,
        ssr=ssr,
        iterations=iterations,
    )
