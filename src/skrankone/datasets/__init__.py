"""
The :mod:`skrankone.datasets` module includes generators of synthetic rank-one
update problems, used in the tests and benchmarks.
"""

from ._base import make_rank_one_problem

__all__ = ["make_rank_one_problem"]
