import time
import warnings
from typing import NamedTuple

import numpy as np
from sklearn.utils import check_array

from ..exceptions import DeflationWarning, NumericalInstabilityError
from ..secular import as_secular_root, check_secular_solver
from ..utils import check_rank_one_inputs, get_progress_bar, no_progress_bar


class UpdateStats(NamedTuple):
    """Diagnostics of a rank-one eigendecomposition update.

    Attributes
    ----------
    total_time : float
        wall-clock time of the whole update, in seconds
    avg_root_time : float
        average time spent in the secular solver per root, in seconds
    avg_iterations : float
        average number of secular solver iterations per root
    n_solved : int
        number of eigenvalues obtained from the secular equation, i.e. not deflated
    n_deflated : int
        number of eigenpairs passed through unchanged
    n_skipped_reflections : int
        number of repeated eigenvalues whose Householder reflection was skipped
    """

    total_time: float
    avg_root_time: float
    avg_iterations: float
    n_solved: int
    n_deflated: int = 0
    n_skipped_reflections: int = 0


def rank_one_weights(V, u):
    r"""
    Expresses the update vector :math:`\mathbf{u}` in the eigenbasis, i.e. returns
    :math:`\mathbf{t} = \mathbf{V}^T\mathbf{u}`.

    If ``V`` is a reduced basis, the component of ``u`` outside the span of ``V``
    is discarded and the resulting update is rank preserving.

    Parameters
    ----------
    V : array-like of shape (n_features, n_components)
        eigenvectors, with orthonormal columns
    u : array-like of shape (n_features,)
        update vector

    Returns
    -------
    t : numpy.ndarray of shape (n_components,)
    """
    V = check_array(V, dtype=np.float64, input_name="V")
    u = check_array(u, ensure_2d=False, dtype=np.float64, input_name="u").ravel()
    if len(u) != V.shape[0]:
        raise ValueError(
            f"The update vector has {len(u)} entries, whereas the eigenvectors have "
            f"{V.shape[0]} rows."
        )
    return V.T @ u


def _sort_eigenpairs(V, E, t):
    """Sorts the eigenvalues in ascending order, permuting V and t alike."""
    order = np.argsort(E, kind="stable")
    return E[order], V[:, order], t[order]


def _clean_eigenvalues(lam, acc):
    """Snaps eigenvalues below ``n * acc * sqrt(max|lam|)`` to zero, so that
    repeated eigenvalues can be detected by exact comparison."""
    tol = len(lam) * acc * np.sqrt(np.max(np.abs(lam)))
    lam = lam.copy()
    lam[np.abs(lam) < tol] = 0
    return lam


def _deflate_repeated(lam, V, t, rho, threshold, verbose=False):
    """
    Replaces the eigenvectors of each repeated eigenvalue by their product with
    a Householder matrix chosen so that a single component of ``t`` remains in
    the group, next to the following eigenvalue when ``rho >= 0`` and next to the
    preceding one otherwise. The other eigenvectors of the group then deflate
    exactly.

    Reflections whose vector has a norm below ``threshold`` are skipped.

    Returns
    -------
    V, t : numpy.ndarray
        reflected eigenvectors and sparsified weights, as new arrays
    n_skipped : int
        number of skipped reflections
    """
    V = V.copy()
    t = t.copy()
    n_skipped = 0

    boundaries = np.flatnonzero(np.diff(lam)) + 1
    starts = np.concatenate([[0], boundaries])
    stops = np.concatenate([boundaries, [len(lam)]])

    for start, stop in zip(starts, stops):
        multiplicity = stop - start
        if multiplicity < 2:
            continue

        v = t[start:stop].copy()
        norm_v = np.linalg.norm(v)
        pivot = 0 if rho < 0 else multiplicity - 1

        t[start:stop] = 0
        t[start + pivot] = -norm_v
        v[pivot] += norm_v

        norm_reflector = np.linalg.norm(v)
        if norm_reflector == 0:
            # the weights are already concentrated on the pivot
            continue
        if norm_reflector > threshold:
            block = V[:, start:stop]
            V[:, start:stop] = block - 2 * np.outer(block @ v, v) / norm_reflector**2
        else:
            n_skipped += 1
            message = (
                f"Skipped the Householder reflection of eigenvalue {lam[start]:.6g} "
                f"(multiplicity {multiplicity}): the reflection vector has norm "
                f"{norm_reflector:.3e}, below the stability threshold "
                f"{threshold:.3e}."
            )
            warnings.warn(message, DeflationWarning)
            if verbose:
                print(message)

    return V, t, n_skipped


def _deflate_small_weights(t, max_lambda, t_norm, acc, deflation_guard):
    """Zeroes the components of ``t`` too small to affect the update."""
    if t_norm == 0:
        return np.zeros_like(t)
    threshold = deflation_guard * (max_lambda / t_norm + t_norm) * acc
    t = t.copy()
    t[np.abs(t) <= threshold] = 0
    return t


def _solve_eigenvalues(e_bar, t_bar, rho, acc, solver, report_progress):
    """
    Solves one secular equation per non-deflated eigenvalue.

    For ``rho < 0`` the equation is solved for the negated, reversed poles with
    scale ``-rho``, so that the solver only ever sees a positive scale.

    Each root is kept as an offset from its closest pole: ``anchors[i]`` is the
    index of that pole in ``e_bar`` and the updated eigenvalue is
    ``e_bar[anchors[i]] + rho * offsets[i]``.

    Returns the updated eigenvalues, the anchors, the offsets, the total
    iteration count and the total solver time.
    """
    n = len(e_bar)
    if rho > 0:
        poles, weights, scale = e_bar, t_bar, rho
    else:
        poles, weights, scale = -e_bar[::-1], t_bar[::-1].copy(), -rho

    anchors = np.zeros(n, dtype=int)
    offsets = np.zeros(n)
    total_iter = 0
    total_time = 0.0
    for i in report_progress(range(n)):
        index = i if rho > 0 else n - 1 - i
        root, n_iter, elapsed = solver(index, poles, weights, scale, acc)
        root = as_secular_root(index, root)
        anchors[i] = root.pole if rho > 0 else n - 1 - root.pole
        offsets[i] = root.offset
        total_iter += n_iter
        total_time += elapsed

    if not np.all(np.isfinite(offsets)):
        bad = np.flatnonzero(~np.isfinite(offsets))
        raise NumericalInstabilityError(
            f"The secular solver returned non-finite roots for indices {bad.tolist()}.",
            stage="eigenvalues",
        )

    f_bar = e_bar[anchors] + rho * offsets
    f_bar[np.abs(f_bar) < acc] = 0
    return f_bar, anchors, offsets, total_iter, total_time


def _reconstruct_eigenvectors(V, active, e_bar, t_bar, rho, anchors, offsets):
    r"""
    Computes the eigenvectors of the non-deflated eigenvalues with the closed form

    .. math::

        \mathbf{w}_i \propto \mathbf{V}
        (f_i\mathbf{I} - \mathbf{E})^{-1} \mathbf{t}

    and normalizes them. The deflated columns of ``V`` are returned unchanged.

    The gaps :math:`f_i - e_j` are formed as ``(e[anchors[i]] - e[j]) + rho *
    offsets[i]``, so the gap to the closest pole is the solver's offset itself.
    """
    gaps = e_bar[anchors][np.newaxis, :] - e_bar[:, np.newaxis]
    gaps += rho * offsets[np.newaxis, :]
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        coefficients = t_bar[:, np.newaxis] / gaps
        W_bar = V[:, active] @ coefficients
        W_bar = W_bar / np.linalg.norm(W_bar, axis=0)

    if not np.all(np.isfinite(W_bar)):
        bad = active[~np.all(np.isfinite(W_bar), axis=0)]
        raise NumericalInstabilityError(
            f"The updated eigenvectors {bad.tolist()} are not finite. An updated "
            "eigenvalue coincides with an original one to working precision.",
            stage="eigenvectors",
        )

    W = V.copy()
    W[:, active] = W_bar
    return W


def eig_rank_one_update(
    V,
    E,
    t,
    rho,
    acc=1e-12,
    *,
    solver="rational",
    deflation_guard=10.0,
    ortho_tol=1e-8,
    progress_bar=False,
    verbose=False,
):
    r"""
    Computes the eigendecomposition of a rank-one modification of a symmetric
    matrix with known eigendecomposition.

    Given :math:`\mathbf{A} = \mathbf{V}\mathbf{E}\mathbf{V}^T`, returns
    :math:`\mathbf{W}, \mathbf{F}` such that

    .. math::

        \mathbf{A} + \rho \mathbf{u}\mathbf{u}^T =
        \mathbf{V} (\mathbf{E} + \rho \mathbf{t}\mathbf{t}^T) \mathbf{V}^T =
        \mathbf{W}\mathbf{F}\mathbf{W}^T

    where :math:`\mathbf{t} = \mathbf{V}^T\mathbf{u}` (see
    :func:`rank_one_weights`).

    The eigenvalues are sorted and cleaned, repeated eigenvalues are deflated
    with Householder reflections and negligible components of ``t`` are
    dropped. The remaining eigenvalues are roots of the secular equation, one
    per solver call, and the corresponding eigenvectors follow from the formula
    of Bunch, Nielsen and Sorensen. If ``V`` is a reduced basis (``n_features >
    n_components``), the update is rank preserving.

    .. note::
        The eigenvector formula is only backward stable if the updated eigenvalues
        are computed to high relative accuracy. Use ``acc`` of the order of 1e-10
        or smaller when the eigenvectors are needed. With looser values the
        eigenvectors are best effort.

    Parameters
    ----------
    V : array-like of shape (n_features, n_components)
        eigenvectors, with orthonormal columns
    E : array-like of shape (n_components,) or (n_components, n_components)
        eigenvalues, as a vector or a diagonal matrix
    t : array-like of shape (n_components,)
        update vector expressed in the eigenbasis
    rho : float
        non-zero scale of the update
    acc : float, default=1e-12
        accuracy of the secular solves and scale of all the zero tests
    solver : {"rational", "brentq"} or callable, default="rational"
        secular root solver, see :mod:`skrankone.secular`
    deflation_guard : float, default=10.0
        multiplier of the thresholds below which a Householder reflection is
        skipped and a component of ``t`` is deflated
    ortho_tol : float or None, default=1e-8
        tolerance of the orthonormality check on ``V``, None to skip it
    progress_bar : bool, default=False
        whether to report the progress of the secular solves with ``tqdm``
    verbose : bool, default=False
        whether to print a summary of the deflation

    Returns
    -------
    W : numpy.ndarray of shape (n_features, n_components)
        updated eigenvectors, in the order of the sorted original eigenvalues
    F : numpy.ndarray of shape (n_components,)
        updated eigenvalues, ``F[j]`` is the eigenvalue of ``W[:, j]``
    stats : UpdateStats
        timing and iteration counts of the secular solves

    Raises
    ------
    InvalidInputError
        if the arguments are inconsistent
    SecularConvergenceError
        if a secular equation cannot be solved
    NumericalInstabilityError
        if an updated eigenvalue or eigenvector is not finite

    Examples
    --------
    >>> import numpy as np
    >>> from skrankone.decomposition import eig_rank_one_update
    >>> V = np.eye(3)
    >>> W, F, stats = eig_rank_one_update(V, [1.0, 2.0, 3.0], [1.0, 1.0, 1.0], 1.0)
    >>> stats.n_solved
    3
    >>> print(np.allclose(W @ np.diag(F) @ W.T, np.diag([1.0, 2.0, 3.0]) + 1.0))
    True
    """
    start = time.perf_counter()

    V, E, t, rho = check_rank_one_inputs(
        V,
        E,
        t,
        rho,
        acc=acc,
        deflation_guard=deflation_guard,
        ortho_tol=ortho_tol,
    )
    solver = check_secular_solver(solver)
    report_progress = get_progress_bar() if progress_bar else no_progress_bar

    lam, V, t = _sort_eigenpairs(V, E, t)
    lam = _clean_eigenvalues(lam, acc)
    n_components = len(lam)

    max_lambda = np.max(np.abs(lam))
    t_norm = np.linalg.norm(t)

    V, t, n_skipped = _deflate_repeated(
        lam,
        V,
        t,
        rho,
        threshold=deflation_guard * (max_lambda + t_norm**2) * acc,
        verbose=verbose,
    )
    t = _deflate_small_weights(t, max_lambda, t_norm, acc, deflation_guard)

    active = np.flatnonzero(t)
    n_solved = len(active)
    if verbose:
        print(
            f"Deflated {n_components - n_solved} of {n_components} eigenpairs, "
            f"solving {n_solved} secular equations"
        )

    F = lam.copy()
    W = V
    total_iter = 0
    root_time = 0.0
    if n_solved > 0:
        e_bar = lam[active]
        t_bar = t[active]
        f_bar, anchors, offsets, total_iter, root_time = _solve_eigenvalues(
            e_bar, t_bar, rho, acc, solver, report_progress
        )
        F[active] = f_bar
        W = _reconstruct_eigenvectors(
            V, active, e_bar, t_bar, rho, anchors, offsets
        )

    stats = UpdateStats(
        total_time=time.perf_counter() - start,
        avg_root_time=root_time / n_solved if n_solved else 0.0,
        avg_iterations=total_iter / n_solved if n_solved else 0.0,
        n_solved=n_solved,
        n_deflated=n_components - n_solved,
        n_skipped_reflections=n_skipped,
    )
    if verbose:
        print(
            f"Solved {n_solved} roots in {stats.total_time:.3e} s, "
            f"{stats.avg_iterations:.2f} iterations per root"
        )

    return W, F, stats
