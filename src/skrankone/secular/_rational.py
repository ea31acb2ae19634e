import time

import numpy as np

from ..exceptions import SecularConvergenceError
from ._base import SecularRoot, _nearest_pole, _secular_frame, _shifted_poles

EPSILON = np.finfo(np.float64).eps


def eta_solve(Di, Di1, psi1, psi1s, psi2, psi2s):
    """
    Step of the "middle way" rational interpolation between the poles ``i`` and
    ``i + 1``, given their distances ``Di`` and ``Di1`` from the current iterate,
    and the two halves of the secular sum and of its derivative.
    """
    w = 1 + psi1 + psi2
    a = (Di + Di1) * w - Di * Di1 * (psi1s + psi2s)
    b = Di * Di1 * w
    c = w - Di * psi1s - Di1 * psi2s
    disc = np.sqrt(abs(a * a - 4 * b * c))
    if a > 0:
        eta = (2 * b) / (a + disc)
    else:
        eta = (a - disc) / (2 * c)
    return eta


def _outer_step(Di, w, dw):
    # above the largest pole there is only one pole to interpolate
    return Di + dw * Di * Di / (w - dw * Di)


def secular_root(index, eigenvalues, weights, scale, tol=1e-12, max_iter=100):
    r"""
    Finds the ``index``-th root of the secular equation of
    :math:`\mathbf{D} + \rho \mathbf{z}\mathbf{z}^T` by rational interpolation.

    The root is measured from the closest pole, as in Gu & Eisenstat, and each
    step interpolates the poles on either side of the root. Steps that would
    leave the current bracket are replaced by bisection, so the iteration cannot
    escape the interval between two poles.

    Parameters
    ----------
    index : int
        index (0-based) of the root, i.e. of the pole just below it
    eigenvalues : numpy.ndarray of shape (n,)
        poles :math:`d_j`, sorted in ascending order and distinct
    weights : numpy.ndarray of shape (n,)
        weights :math:`z_j`, ``weights[index]`` must be non-zero
    scale : float
        positive scale :math:`\rho` of the rank-one update
    tol : float, default=1e-12
        relative tolerance on the distance between the root and the nearest pole
    max_iter : int, default=100
        iteration budget

    Returns
    -------
    root : SecularRoot
        offset of the root from the closer of the poles ``index`` and
        ``index + 1``, the updated eigenvalue is
        ``root.eigenvalue(eigenvalues, scale)``
    n_iter : int
        number of iterations
    elapsed : float
        wall-clock time spent on the root, in seconds

    Raises
    ------
    SecularConvergenceError
        if the root is not found within ``max_iter`` iterations
    """
    start = time.perf_counter()
    delta, z2, upper = _secular_frame(index, eigenvalues, weights, scale)
    outer = index == len(delta) - 1
    rtol = max(tol, 4 * EPSILON)

    pole = _nearest_pole(index, delta, z2, upper)
    if outer:
        lo, hi = 0.0, upper
        tau = upper
    elif pole == index:
        # zero is on the left half of the interval
        lo, hi = 0.0, 0.5 * upper
        tau = 0.5 * upper
    else:
        # zero is on the right half of the interval
        lo, hi = -0.5 * upper, 0.0
        tau = -0.5 * upper

    shifted = _shifted_poles(eigenvalues, pole, scale)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for n_iter in range(1, max_iter + 1):
            diff = shifted - tau
            vi = z2 / diff
            vii = vi / diff
            psi1 = vi[: index + 1].sum()
            psi1s = vii[: index + 1].sum()
            psi2 = vi[index + 1 :].sum()
            psi2s = vii[index + 1 :].sum()
            w = 1 + psi1 + psi2

            if w == 0:
                break
            # w is increasing between two poles
            if w > 0:
                hi = tau
            else:
                lo = tau

            if outer:
                eta = _outer_step(diff[index], w, psi1s)
            else:
                eta = eta_solve(diff[index], diff[index + 1], psi1, psi1s, psi2, psi2s)

            if w * eta >= 0:
                eta = -w / (psi1s + psi2s)
            if not (np.isfinite(eta) and lo < tau + eta < hi):
                eta = 0.5 * (lo + hi) - tau

            tau += eta
            if abs(eta) <= rtol * abs(tau):
                break
            if hi - lo <= 2 * EPSILON * max(abs(lo), abs(hi)):
                break
        else:
            raise SecularConvergenceError(
                f"The secular equation for root {index} did not converge in "
                f"{max_iter} iterations (last step {eta:.3e}, bracket "
                f"[{lo:.17g}, {hi:.17g}] around pole {pole})."
            )

    return SecularRoot(pole, tau), n_iter, time.perf_counter() - start
