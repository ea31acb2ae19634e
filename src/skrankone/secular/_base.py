from typing import NamedTuple

import numpy as np


class SecularRoot(NamedTuple):
    """Root of a secular equation, measured from its closest pole.

    The updated eigenvalue is ``eigenvalues[pole] + scale * offset``. The offset
    keeps its relative accuracy even when the root is much closer to the pole
    than the pole is to zero, which the eigenvector formula relies on.

    Attributes
    ----------
    pole : int
        index of the pole the offset is measured from, either the root index or
        the one above it
    offset : float
        scaled distance between the root and the pole
    """

    pole: int
    offset: float

    def eigenvalue(self, eigenvalues, scale):
        """Returns the updated eigenvalue ``eigenvalues[pole] + scale * offset``."""
        return eigenvalues[self.pole] + scale * self.offset


def as_secular_root(index, root):
    """Wraps a plain root ``mu``, measured from pole ``index``, in a
    :class:`SecularRoot`."""
    if isinstance(root, SecularRoot):
        return root
    return SecularRoot(index, root)


def secular_function(mu, delta, z2):
    r"""
    Evaluates the scaled secular function

    .. math::

        w(\mu) = 1 + \sum_j \frac{z_j^2}{\delta_j - \mu}

    whose roots :math:`\mu` give the updated eigenvalues
    :math:`d_i + \rho \mu` of :math:`\mathbf{D} + \rho \mathbf{z}\mathbf{z}^T`
    once the poles are expressed as :math:`\delta_j = (d_j - d_i) / \rho`.

    Parameters
    ----------
    mu : float
        point at which to evaluate the function
    delta : numpy.ndarray of shape (n,)
        scaled and shifted poles
    z2 : numpy.ndarray of shape (n,)
        squared weights

    Returns
    -------
    float
    """
    return 1.0 + np.sum(z2 / (delta - mu))


def _secular_frame(index, eigenvalues, weights, scale):
    """
    Moves the secular equation of the ``index``-th root into the frame where the
    pole ``index`` sits at the origin and the scale is one.

    Returns the shifted poles, the squared weights and the upper end of the
    interval that brackets the root.
    """
    if scale <= 0:
        raise ValueError(f"The secular equation scale must be positive, got {scale}.")

    d = np.asarray(eigenvalues, dtype=np.float64)
    z2 = np.asarray(weights, dtype=np.float64) ** 2

    if d.ndim != 1 or d.shape != z2.shape:
        raise ValueError(
            "The poles and weights of the secular equation must be vectors of the "
            f"same length, got shapes {d.shape} and {z2.shape}."
        )
    if not 0 <= index < len(d):
        raise ValueError(
            f"Root index {index} is out of range for {len(d)} poles."
        )

    delta = (d - d[index]) / scale
    if index < len(d) - 1:
        upper = delta[index + 1]
    else:
        # the largest root is at most ||z||^2 above the largest pole
        upper = z2.sum()

    return delta, z2, upper


def _nearest_pole(index, delta, z2, upper):
    """Returns the pole closest to the ``index``-th root, read off the sign of the
    secular function at the middle of the interval."""
    if index == len(delta) - 1:
        return index
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if secular_function(0.5 * upper, delta, z2) >= 0:
            return index
    return index + 1


def _shifted_poles(eigenvalues, pole, scale):
    """Scaled poles measured from ``eigenvalues[pole]``."""
    d = np.asarray(eigenvalues, dtype=np.float64)
    return (d - d[pole]) / scale
