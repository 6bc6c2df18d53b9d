"""
Rule checks over the board's derived data.

Every check is pure and returns a list of violations (empty on success):
- check_no_fold: per-color horizontal edges form a partial injection
- check_no_pattern: trio signatures are unique across both rows
- check_girth: no row cycle is shorter than a bound
"""

from .girth import check_girth
from .no_fold import check_no_fold
from .no_pattern import check_no_pattern, iter_trios

__all__ = [
    "check_no_fold",
    "check_no_pattern",
    "iter_trios",
    "check_girth",
]
