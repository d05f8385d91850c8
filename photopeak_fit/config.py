# File: photopeak_fit/config.py
from dataclasses import dataclass, fields
from typing import Optional

# --- Solver defaults ---
DEFAULT_MAX_ITER = 1000
DEFAULT_X_TOL = 1e-8
DEFAULT_F_TOL = 1e-12
DEFAULT_G_TOL = 1e-12
DEFAULT_INITIAL_LAMBDA = 10.0
DEFAULT_LAMBDA_INCREASE = 10.0
DEFAULT_LAMBDA_DECREASE = 0.1
DEFAULT_MIN_DIAGONAL = 1e-6
DEFAULT_MAX_DIAGONAL = 1e32
DEFAULT_MAX_LAMBDA = 1e16
BOUND_PROXIMITY_EPS = 1e-8


@dataclass(frozen=True)
class SolverOptions:
    """
    Tuning knobs for the Levenberg-Marquardt solver.

    diff_step is the relative finite-difference step (None -> eps**(1/3)),
    rcond the relative singular-value cutoff used for the covariance
    (None -> eps * max(m, k)).
    """
    max_iter: int = DEFAULT_MAX_ITER
    x_tol: float = DEFAULT_X_TOL
    f_tol: float = DEFAULT_F_TOL
    g_tol: float = DEFAULT_G_TOL
    initial_lambda: float = DEFAULT_INITIAL_LAMBDA
    lambda_increase: float = DEFAULT_LAMBDA_INCREASE
    lambda_decrease: float = DEFAULT_LAMBDA_DECREASE
    min_diagonal: float = DEFAULT_MIN_DIAGONAL
    max_diagonal: float = DEFAULT_MAX_DIAGONAL
    max_lambda: float = DEFAULT_MAX_LAMBDA
    diff_step: Optional[float] = None
    rcond: Optional[float] = None
    scale_diagonal: bool = True
    verbose: bool = False

    def __post_init__(self):
        if self.max_iter < 1:
            raise ValueError("max_iter must be at least 1")
        if self.initial_lambda <= 0:
            raise ValueError("initial_lambda must be positive")
        if self.lambda_increase <= 1 or not 0 < self.lambda_decrease < 1:
            raise ValueError("lambda_increase must be > 1 and lambda_decrease in (0, 1)")

    @classmethod
    def from_kwargs(cls, **kwargs):
        """Build options from keyword arguments, rejecting unknown names."""
        known = {f.name for f in fields(cls)}
        unknown = set(kwargs) - known
        if unknown:
            raise TypeError(f"Unknown solver option(s): {', '.join(sorted(unknown))}")
        return cls(**kwargs)
