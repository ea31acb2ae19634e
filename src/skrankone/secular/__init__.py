r"""
The :mod:`skrankone.secular` module solves the secular equation

.. math::

    1 + \rho \sum_j \frac{z_j^2}{d_j - \lambda} = 0

one root at a time. A secular solver is any callable with the signature
``solver(index, eigenvalues, weights, scale, tol)`` returning the root, the number
of iterations and the elapsed time. The root is either a float :math:`\mu` such
that :math:`\lambda = d_{index} + \rho \mu`, or a :class:`SecularRoot` holding
its offset from the closer of the poles :math:`d_{index}` and
:math:`d_{index + 1}`, which keeps the gap to that pole accurate.

Two solvers are provided:

* :func:`secular_root`, a rational interpolation iteration, used by default
* :func:`brentq_secular_root`, a bracketing solve built on
  :func:`scipy.optimize.root_scalar`
"""

from ._base import SecularRoot, as_secular_root, secular_function
from ._brentq import brentq_secular_root
from ._rational import secular_root
from ._utils import SECULAR_SOLVERS, check_secular_solver

__all__ = [
    "SecularRoot",
    "as_secular_root",
    "secular_function",
    "secular_root",
    "brentq_secular_root",
    "check_secular_solver",
    "SECULAR_SOLVERS",
]
