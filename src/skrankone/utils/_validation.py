import numbers

import numpy as np
from sklearn.utils import check_array

from ..exceptions import InvalidInputError


def _as_vector(array, name):
    try:
        array = check_array(array, ensure_2d=False, dtype=np.float64, input_name=name)
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"Invalid {name}: {e}") from e

    if array.ndim == 2 and 1 in array.shape:
        array = array.ravel()
    if array.ndim != 1:
        raise InvalidInputError(
            f"{name} must be a vector, got an array of shape {array.shape}."
        )
    return array


def check_rank_one_inputs(
    V, E, t, rho, acc=1e-12, deflation_guard=10.0, ortho_tol=1e-8
):
    r"""
    Validates the arguments of a rank-one eigendecomposition update and returns
    them in canonical form.

    Parameters
    ----------
    V : array-like of shape (n_features, n_components)
        eigenvectors, with orthonormal columns
    E : array-like of shape (n_components,) or (n_components, n_components)
        eigenvalues, either as a vector or as a diagonal matrix
    t : array-like of shape (n_components,)
        update vector expressed in the eigenbasis, :math:`\mathbf{V}^T\mathbf{u}`
    rho : float
        non-zero scale of the update
    acc : float, default=1e-12
        accuracy, must lie in (0, 1)
    deflation_guard : float, default=10.0
        multiplier of the deflation thresholds, must be positive
    ortho_tol : float or None, default=1e-8
        largest admissible entry of :math:`\mathbf{V}^T\mathbf{V} - \mathbf{I}`.
        If None, the orthonormality of ``V`` is not checked.

    Returns
    -------
    V : numpy.ndarray of shape (n_features, n_components)
    E : numpy.ndarray of shape (n_components,)
    t : numpy.ndarray of shape (n_components,)
    rho : float

    Raises
    ------
    InvalidInputError
        naming the argument and the violated constraint
    """
    try:
        V = check_array(V, dtype=np.float64, input_name="V")
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"Invalid V: {e}") from e

    if np.ndim(E) == 2 and np.shape(E)[0] == np.shape(E)[1] and np.shape(E)[0] > 1:
        # eigenvalues given as a diagonal matrix
        E = np.diag(_check_square(E))
    E = _as_vector(E, "E")
    t = _as_vector(t, "t")

    n_components = V.shape[1]
    if len(E) != n_components:
        raise InvalidInputError(
            f"E has {len(E)} eigenvalues, whereas V has {n_components} columns."
        )
    if len(t) != n_components:
        raise InvalidInputError(
            f"t has {len(t)} components, whereas V has {n_components} columns."
        )

    if not isinstance(rho, numbers.Real) or not np.isfinite(rho):
        raise InvalidInputError(f"rho must be a finite real scalar, got {rho!r}.")
    if rho == 0:
        raise InvalidInputError(
            "rho must be non-zero, an update with rho=0 leaves the "
            "eigendecomposition unchanged."
        )

    if not isinstance(acc, numbers.Real) or not 0 < acc < 1:
        raise InvalidInputError(f"acc must lie in (0, 1), got {acc!r}.")
    if not isinstance(deflation_guard, numbers.Real) or not deflation_guard > 0:
        raise InvalidInputError(
            f"deflation_guard must be positive, got {deflation_guard!r}."
        )

    if ortho_tol is not None:
        deviation = np.max(np.abs(V.T @ V - np.eye(n_components)))
        if deviation > ortho_tol:
            raise InvalidInputError(
                "The columns of V must be orthonormal. The largest entry of "
                f"V^T V - I is {deviation:.3e}, above ortho_tol={ortho_tol:.3e}."
            )

    return V, E, t, float(rho)


def _check_square(E):
    try:
        return check_array(E, dtype=np.float64, input_name="E")
    except (ValueError, TypeError) as e:
        raise InvalidInputError(f"Invalid E: {e}") from e
