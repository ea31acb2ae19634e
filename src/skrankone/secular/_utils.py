from ._brentq import brentq_secular_root
from ._rational import secular_root

SECULAR_SOLVERS = {
    "rational": secular_root,
    "brentq": brentq_secular_root,
}


def check_secular_solver(solver):
    """
    Returns the secular root solver designated by ``solver``.

    Parameters
    ----------
    solver : {"rational", "brentq"} or callable
        name of a built-in solver, or a callable with the signature
        ``solver(index, eigenvalues, weights, scale, tol) -> (root, n_iter,
        elapsed)``

    Returns
    -------
    callable

    Raises
    ------
    ValueError
        If ``solver`` is neither a known name nor a callable.
    """
    if callable(solver):
        return solver
    try:
        return SECULAR_SOLVERS[solver]
    except (KeyError, TypeError):
        raise ValueError(
            f"Unknown secular solver {solver!r}. Supported solvers are "
            f"{sorted(SECULAR_SOLVERS)} or a callable."
        )
