r"""
The :mod:`skrankone.decomposition` module updates an eigendecomposition
:math:`\mathbf{A} = \mathbf{V}\mathbf{E}\mathbf{V}^T` after a rank-one
modification :math:`\mathbf{A} + \rho\mathbf{u}\mathbf{u}^T`, following
[Bunch1978]_ for the eigenvectors and [Gu1994]_ for the deflation of repeated
eigenvalues.

The module includes:

* :func:`eig_rank_one_update`, which performs a single update given the
  eigenpairs and the update vector expressed in the eigenbasis
* :func:`rank_one_weights`, which expresses an update vector in the eigenbasis
* :class:`RankOneEigenUpdater`, an estimator tracking the eigendecomposition of a
  matrix through a sequence of updates

.. [Bunch1978] J. R. Bunch, C. P. Nielsen, D. C. Sorensen, "Rank-one modification
   of the symmetric eigenproblem", Numer. Math. 31, 31-48 (1978)
.. [Gu1994] M. Gu, S. C. Eisenstat, "A stable and efficient algorithm for the
   rank-one modification of the symmetric eigenproblem", SIAM J. Matrix Anal.
   Appl. 15, 1266-1276 (1994)
"""

from ._rank_one_update import UpdateStats, eig_rank_one_update, rank_one_weights
from ._eigen_updater import RankOneEigenUpdater

__all__ = [
    "eig_rank_one_update",
    "rank_one_weights",
    "UpdateStats",
    "RankOneEigenUpdater",
]
