import math
from typing import List, Optional, Sequence, Tuple

MinMax = Tuple[Tuple[Optional[float], ...], Tuple[Optional[float], ...]]


def compute_min_max(cells: Sequence[Sequence[float]], col_count: int) -> MinMax:
    """
    Per-column minimum and maximum in a single pass over the grid.

    NaN cells are skipped, so the result does not depend on row order.
    Columns with no comparable value get None for both.
    """
    mins: List[Optional[float]] = [None] * col_count
    maxs: List[Optional[float]] = [None] * col_count

    for row in cells:
        for col in range(col_count):
            value = row[col]
            if math.isnan(value):
                continue
            if mins[col] is None or value < mins[col]:
                mins[col] = value
            if maxs[col] is None or value > maxs[col]:
                maxs[col] = value

    return tuple(mins), tuple(maxs)
