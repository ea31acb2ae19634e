"""
The :mod:`skrankone.exceptions` module includes the errors and warnings raised
while updating an eigendecomposition.
"""

import numpy as np

__all__ = [
    "RankOneUpdateError",
    "InvalidInputError",
    "SecularConvergenceError",
    "NumericalInstabilityError",
    "DeflationWarning",
]


class RankOneUpdateError(Exception):
    """Base class for failures of a rank-one eigendecomposition update.

    Parameters
    ----------
    reason : str
        Human readable description of the failure.
    stage : str
        Name of the stage that failed, one of ``"input"``, ``"secular"``,
        ``"eigenvalues"`` or ``"eigenvectors"``.
    """

    def __init__(self, reason, stage):
        super().__init__(reason)
        self.reason = reason
        self.stage = stage


class InvalidInputError(RankOneUpdateError, ValueError):
    """Raised when the eigenbasis, eigenvalues, weights or ``rho`` violate a
    precondition of the update. Inherits from :class:`ValueError`."""

    def __init__(self, reason):
        super().__init__(reason, stage="input")


class SecularConvergenceError(RankOneUpdateError, np.linalg.LinAlgError):
    """Raised when a secular equation root could not be found within the
    iteration budget of the solver."""

    def __init__(self, reason):
        super().__init__(reason, stage="secular")


class NumericalInstabilityError(RankOneUpdateError, np.linalg.LinAlgError):
    """Raised when an updated eigenvalue or eigenvector is not finite."""


class DeflationWarning(UserWarning):
    """Warning used when the Householder reflection of a repeated eigenvalue
    is skipped because the reflection vector is numerically zero.

    This is not an error, the update proceeds with the unreflected eigenvectors,
    but it indicates borderline conditioned input.
    """
