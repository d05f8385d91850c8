# File: photopeak_fit/analysis/covariance.py
import numpy as np
from scipy import linalg

from photopeak_fit.errors import InsufficientDataError, SingularCovarianceError


def covariance_matrix(jacobian, residuals, rcond=None):
    """
    Approximate parameter covariance s^2 * (J^T J)^-1 with
    s^2 = r^T r / (m - k).

    The inverse is formed from the SVD of J. A rank-deficient Jacobian
    (smallest singular value <= rcond * largest) raises
    SingularCovarianceError.
    """
    J = np.asarray(jacobian, dtype=float)
    r = np.asarray(residuals, dtype=float)
    if J.ndim != 2 or J.shape[0] != r.size:
        raise ValueError(f"jacobian shape {J.shape} does not match {r.size} residuals")
    m, k = J.shape
    if m <= k:
        raise InsufficientDataError(
            f"standard errors need more data points than parameters (m={m}, k={k})"
        )
    if not (np.all(np.isfinite(J)) and np.all(np.isfinite(r))):
        raise SingularCovarianceError("Jacobian or residuals contain non-finite values")

    s2 = float(r @ r) / max(m - k, 1)

    _, sv, vt = linalg.svd(J, full_matrices=False)
    if rcond is None:
        rcond = np.finfo(float).eps * max(m, k)
    if sv[0] == 0.0 or sv[-1] <= rcond * sv[0]:
        raise SingularCovarianceError(
            f"J^T J is singular (condition number {sv[0] / sv[-1] if sv[-1] else np.inf:.3g}); "
            "some parameters are not constrained by the data"
        )
    vs = vt.T / sv
    return s2 * (vs @ vs.T)


def standard_errors(jacobian, residuals, rcond=None):
    """1-sigma parameter uncertainties, in parameter order."""
    cov = covariance_matrix(jacobian, residuals, rcond=rcond)
    return np.sqrt(np.diag(cov))
