import time

import numpy as np
from scipy.optimize import root_scalar

from ..exceptions import SecularConvergenceError
from ._base import (
    SecularRoot,
    _nearest_pole,
    _secular_frame,
    _shifted_poles,
    secular_function,
)

EPSILON = np.finfo(np.float64).eps


def brentq_secular_root(index, eigenvalues, weights, scale, tol=1e-12, max_iter=100):
    r"""
    Finds the ``index``-th root of the secular equation of
    :math:`\mathbf{D} + \rho \mathbf{z}\mathbf{z}^T` with Brent's method, using
    the interlacing interval as bracket.

    The secular function is multiplied by the distance to the closest pole,
    which removes the singularity there, so the bracket runs from that pole to
    the middle of the interval, or to ``sum(weights**2)`` for the top root.

    Slower than :func:`skrankone.secular.secular_root`, but it relies only on a
    sign change and is useful as a reference.

    Parameters
    ----------
    index : int
        index (0-based) of the root, i.e. of the pole just below it
    eigenvalues : numpy.ndarray of shape (n,)
        poles, sorted in ascending order and distinct
    weights : numpy.ndarray of shape (n,)
        weights, ``weights[index]`` must be non-zero
    scale : float
        positive scale of the rank-one update
    tol : float, default=1e-12
        relative tolerance on the root
    max_iter : int, default=100
        iteration budget passed to :func:`scipy.optimize.root_scalar`

    Returns
    -------
    root, n_iter, elapsed : SecularRoot, int, float
        same contract as :func:`skrankone.secular.secular_root`

    Raises
    ------
    SecularConvergenceError
        if :func:`scipy.optimize.root_scalar` does not converge
    """
    start = time.perf_counter()
    delta, z2, upper = _secular_frame(index, eigenvalues, weights, scale)
    pole = _nearest_pole(index, delta, z2, upper)
    shifted = _shifted_poles(eigenvalues, pole, scale)

    others = np.arange(len(shifted)) != pole
    shifted_others = shifted[others]
    z2_others = z2[others]

    def fnc(tau):
        # secular function times the distance -tau to the closest pole
        return z2[pole] - tau * secular_function(tau, shifted_others, z2_others)

    if index == len(delta) - 1:
        far = upper
    elif pole == index:
        far = 0.5 * upper
    else:
        far = -0.5 * upper

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if z2[pole] == 0:
            return SecularRoot(pole, 0.0), 0, time.perf_counter() - start
        if fnc(far) == 0:
            return SecularRoot(pole, far), 0, time.perf_counter() - start

        sol = root_scalar(
            fnc,
            bracket=sorted([0.0, far]),
            method="brentq",
            xtol=np.finfo(np.float64).tiny,
            rtol=max(tol, 4 * EPSILON),
            maxiter=max_iter,
        )

    if not sol.converged:
        raise SecularConvergenceError(
            f"The secular equation for root {index} did not converge: {sol.flag}"
        )

    elapsed = time.perf_counter() - start
    return SecularRoot(pole, np.real(sol.root)), sol.iterations, elapsed
