import numbers

import numpy as np
from sklearn.utils import check_random_state


def make_rank_one_problem(
    n_features=10,
    n_components=None,
    multiplicities=None,
    scale=10.0,
    random_state=None,
):
    """Generate a random eigendecomposition and rank-one update.

    The eigenvectors are the first ``n_components`` columns of a random orthogonal
    matrix, the eigenvalues are drawn uniformly in ``[0, scale)`` and returned in
    random order, and the update vector has standard normal entries.

    Parameters
    ----------
    n_features : int, default=10
        number of rows of the eigenvectors
    n_components : int, default=None
        number of eigenpairs. If None, ``n_features`` eigenpairs are generated.
    multiplicities : list of int, default=None
        multiplicity of each distinct eigenvalue, must sum to ``n_components``.
        If None, all eigenvalues are distinct.
    scale : float, default=10.0
        upper bound of the eigenvalues
    random_state : int, RandomState instance or None, default=None
        Determines random number generation. Pass an int for reproducible output
        across multiple function calls.

    Returns
    -------
    V : numpy.ndarray of shape (n_features, n_components)
        eigenvectors, with orthonormal columns
    E : numpy.ndarray of shape (n_components,)
        eigenvalues
    t : numpy.ndarray of shape (n_components,)
        update vector expressed in the eigenbasis

    Examples
    --------
    >>> from skrankone.datasets import make_rank_one_problem
    >>> V, E, t = make_rank_one_problem(6, multiplicities=[2, 1, 3], random_state=0)
    >>> V.shape, len(set(E))
    ((6, 6), 3)
    """
    random_state = check_random_state(random_state)

    if n_components is None:
        n_components = n_features
    if (
        not isinstance(n_components, numbers.Integral)
        or not 0 < n_components <= n_features
    ):
        raise ValueError(
            f"n_components={n_components} must be an integer between 1 and "
            f"n_features={n_features}."
        )

    if multiplicities is None:
        multiplicities = np.ones(n_components, dtype=int)
    multiplicities = np.asarray(multiplicities, dtype=int)
    if np.any(multiplicities < 1) or multiplicities.sum() != n_components:
        raise ValueError(
            "multiplicities must be positive and sum to n_components, got "
            f"{multiplicities.tolist()} for n_components={n_components}."
        )

    distinct = np.sort(random_state.uniform(0, scale, size=len(multiplicities)))
    E = np.repeat(distinct, multiplicities)[random_state.permutation(n_components)]

    Q, _ = np.linalg.qr(random_state.normal(size=(n_features, n_features)))
    V = Q[:, :n_components]
    t = random_state.normal(size=n_components)

    return V, E, t
