r"""
scikit-rankone
==============

scikit-rankone updates the eigendecomposition of a symmetric matrix after a
rank-one modification, following the `scikit-learn <https://scikit-learn.org/>`_
API and coding guidelines. Given :math:`\mathbf{A} = \mathbf{V}\mathbf{E}
\mathbf{V}^T`, the eigenpairs of :math:`\mathbf{A} + \rho\mathbf{u}\mathbf{u}^T`
are obtained from one secular equation per eigenvalue instead of a full
re-diagonalization.
"""

from ._version import __version__  # noqa: F401
