"""
The :mod:`skrankone.utils` module includes functions which are
used by multiple packages
"""

from ._progress_bar import (
    get_progress_bar,
    no_progress_bar,
)
from ._validation import check_rank_one_inputs

__all__ = [
    "get_progress_bar",
    "no_progress_bar",
    "check_rank_one_inputs",
]
