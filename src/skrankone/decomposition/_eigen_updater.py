import numbers

import numpy as np
from scipy import linalg
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted, validate_data

from ..secular import check_secular_solver
from ._rank_one_update import eig_rank_one_update, rank_one_weights


class RankOneEigenUpdater(TransformerMixin, BaseEstimator):
    r"""Tracks the eigendecomposition of a symmetric matrix through a sequence of
    rank-one updates :math:`\mathbf{X} \leftarrow \mathbf{X} + \rho
    \mathbf{u}\mathbf{u}^T`.

    The matrix is diagonalized once in :meth:`fit`, after which every call to
    :meth:`partial_fit` updates the eigenpairs with
    :func:`~skrankone.decomposition.eig_rank_one_update`, without
    re-diagonalizing.

    Parameters
    ----------
    n_components : int, default=None
        number of eigenpairs to track, those with the largest eigenvalues. If None,
        all eigenpairs are tracked. With fewer eigenpairs than features the updates
        are rank preserving: only the component of each update vector in the span
        of the tracked eigenvectors is applied.
    acc : float, default=1e-12
        accuracy of the updates, see
        :func:`~skrankone.decomposition.eig_rank_one_update`
    solver : {"rational", "brentq"} or callable, default="rational"
        secular root solver, see :mod:`skrankone.secular`
    deflation_guard : float, default=10.0
        multiplier of the deflation thresholds
    progress_bar : bool, default=False
        whether to report the progress of the secular solves with ``tqdm``
    verbose : bool, default=False
        whether to print a summary of each update

    Attributes
    ----------
    eigenvalues_ : numpy.ndarray of shape (n_components,)
        current eigenvalues, in ascending order
    eigenvectors_ : numpy.ndarray of shape (n_features, n_components)
        current eigenvectors, ``eigenvectors_[:, j]`` belongs to
        ``eigenvalues_[j]``
    n_components_ : int
        number of tracked eigenpairs
    n_features_in_ : int
        number of features of the matrix passed to :meth:`fit`
    n_updates_ : int
        number of rank-one updates applied since :meth:`fit`
    stats_ : list of UpdateStats
        diagnostics of each update

    Examples
    --------
    >>> import numpy as np
    >>> from skrankone.decomposition import RankOneEigenUpdater
    >>> X = np.diag([1.0, 2.0, 4.0])
    >>> updater = RankOneEigenUpdater().fit(X)
    >>> u = np.array([1.0, 0.0, 1.0])
    >>> _ = updater.partial_fit(u, rho=0.5)
    >>> expected = np.linalg.eigvalsh(X + 0.5 * np.outer(u, u))
    >>> print(np.allclose(updater.eigenvalues_, expected))
    True
    """

    def __init__(
        self,
        n_components=None,
        acc=1e-12,
        solver="rational",
        deflation_guard=10.0,
        progress_bar=False,
        verbose=False,
    ):
        self.n_components = n_components
        self.acc = acc
        self.solver = solver
        self.deflation_guard = deflation_guard
        self.progress_bar = progress_bar
        self.verbose = verbose

    def fit(self, X, y=None):
        """Diagonalizes the symmetric matrix ``X``.

        Parameters
        ----------
        X : array-like of shape (n_features, n_features)
            symmetric matrix
        y : None
            Ignored.

        Returns
        -------
        self : object
            Returns the instance itself.
        """
        X = validate_data(self, X, dtype=np.float64)

        if X.shape[0] != X.shape[1]:
            raise ValueError(f"X must be a square matrix, got shape {X.shape}.")
        if not np.allclose(X, X.T):
            raise ValueError("X must be symmetric.")

        check_secular_solver(self.solver)
        n_features = X.shape[0]

        if self.n_components is None:
            self.eigenvalues_, self.eigenvectors_ = linalg.eigh(X)
        else:
            if (
                not isinstance(self.n_components, numbers.Integral)
                or not 0 < self.n_components <= n_features
            ):
                raise ValueError(
                    f"n_components={self.n_components} must be an integer between 1 "
                    f"and n_features={n_features}."
                )
            self.eigenvalues_, self.eigenvectors_ = linalg.eigh(
                X, subset_by_index=[n_features - self.n_components, n_features - 1]
            )

        self.n_components_ = len(self.eigenvalues_)
        self.n_updates_ = 0
        self.stats_ = []
        return self

    def partial_fit(self, u, rho=1.0):
        r"""Applies the update :math:`\mathbf{X} + \rho \mathbf{u}\mathbf{u}^T` to
        the tracked eigendecomposition.

        Parameters
        ----------
        u : array-like of shape (n_features,)
            update vector
        rho : float, default=1.0
            non-zero scale of the update

        Returns
        -------
        self : object
            Returns the instance itself.
        """
        check_is_fitted(self, ["eigenvalues_", "eigenvectors_"])

        t = rank_one_weights(self.eigenvectors_, u)
        # the basis is produced by eigh or by a previous update
        W, F, stats = eig_rank_one_update(
            self.eigenvectors_,
            self.eigenvalues_,
            t,
            rho,
            acc=self.acc,
            solver=self.solver,
            deflation_guard=self.deflation_guard,
            ortho_tol=None,
            progress_bar=self.progress_bar,
            verbose=self.verbose,
        )

        order = np.argsort(F, kind="stable")
        self.eigenvalues_ = F[order]
        self.eigenvectors_ = W[:, order]
        self.n_updates_ += 1
        self.stats_.append(stats)
        return self

    def transform(self, X):
        """Projects ``X`` onto the tracked eigenvectors.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)

        Returns
        -------
        T : numpy.ndarray of shape (n_samples, n_components)
        """
        check_is_fitted(self, ["eigenvalues_", "eigenvectors_"])
        X = validate_data(self, X, dtype=np.float64, reset=False)
        return X @ self.eigenvectors_

    def get_matrix(self):
        r"""Rebuilds :math:`\mathbf{V}\mathbf{\Lambda}\mathbf{V}^T` from the tracked
        eigenpairs.

        Returns
        -------
        numpy.ndarray of shape (n_features, n_features)
        """
        check_is_fitted(self, ["eigenvalues_", "eigenvectors_"])
        return (self.eigenvectors_ * self.eigenvalues_) @ self.eigenvectors_.T
