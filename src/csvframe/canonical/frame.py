import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from csvframe.utils.exceptions import StatisticsUnavailableError

Row = Tuple[float, ...]

MALFORMED_NUMERIC_FIELD = "MALFORMED_NUMERIC_FIELD"
COLUMN_COUNT_MISMATCH = "COLUMN_COUNT_MISMATCH"


@dataclass(frozen=True)
class LoadIssue:
    """
    A problem the loader resolved with a lenient policy instead of aborting.
    """
    kind: str                   # MALFORMED_NUMERIC_FIELD, COLUMN_COUNT_MISMATCH
    line_number: int            # 1-based file line
    row: int                    # 0-based data row
    column: Optional[int] = None
    detail: str = ""


@dataclass(frozen=True)
class DataFrame:
    """
    Canonical in-memory representation of a loaded numeric CSV.

    Built once by the loader and never mutated afterwards.
    Every row in `cells` has exactly len(feature_names) values.
    """
    delimiter: str
    feature_names: Tuple[str, ...]
    cells: Tuple[Row, ...]

    # Populated only in detailed-statistics mode
    min_values: Optional[Tuple[Optional[float], ...]] = None
    max_values: Optional[Tuple[Optional[float], ...]] = None

    source: Optional[str] = None
    issues: Tuple[LoadIssue, ...] = field(default_factory=tuple)

    def __post_init__(self):
        width = len(self.feature_names)
        for index, row in enumerate(self.cells):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} values, expected {width}"
                )

    # --------------------------------------------------
    # Size
    # --------------------------------------------------
    @property
    def row_count(self) -> int:
        return len(self.cells)

    @property
    def col_count(self) -> int:
        return len(self.feature_names)

    @property
    def cell_count(self) -> int:
        return self.row_count * self.col_count

    def dimensions(self) -> Tuple[int, int, int]:
        return self.row_count, self.col_count, self.cell_count

    @property
    def has_statistics(self) -> bool:
        return self.min_values is not None and self.max_values is not None

    # --------------------------------------------------
    # Access
    # --------------------------------------------------
    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.row_count:
            raise IndexError(f"Row index {row} out of range [0, {self.row_count})")

    def _check_col(self, col: int) -> None:
        if not 0 <= col < self.col_count:
            raise IndexError(f"Column index {col} out of range [0, {self.col_count})")

    def cell(self, row: int, col: int) -> float:
        self._check_row(row)
        self._check_col(col)
        return self.cells[row][col]

    def row(self, index: int) -> Row:
        self._check_row(index)
        return self.cells[index]

    def column(self, col: int) -> Tuple[float, ...]:
        self._check_col(col)
        return tuple(r[col] for r in self.cells)

    def head(self, n: int = 5) -> List[Row]:
        """
        First min(n, row_count) rows, in file order.
        """
        if n < 0:
            raise ValueError("n must be non-negative")
        return list(self.cells[:n])

    def tail(self, n: int = 5) -> List[Row]:
        """
        Last min(n, row_count) rows, in file order.
        """
        if n < 0:
            raise ValueError("n must be non-negative")
        if n == 0:
            return []
        return list(self.cells[-n:])

    def random_sample(
        self, n: int = 5, rng: Optional[random.Random] = None
    ) -> List[Tuple[int, Row]]:
        """
        Draw min(n, row_count) rows uniformly at random, with replacement.

        Returns (row_index, row) pairs so callers can show where each
        sample came from.
        """
        if n < 0:
            raise ValueError("n must be non-negative")
        if self.row_count == 0:
            return []
        rng = rng or random.Random()
        draws = min(n, self.row_count)
        indexes = [rng.randrange(self.row_count) for _ in range(draws)]
        return [(i, self.cells[i]) for i in indexes]

    # --------------------------------------------------
    # Detailed statistics
    # --------------------------------------------------
    def min_value(self, col: int) -> Optional[float]:
        if not self.has_statistics:
            raise StatisticsUnavailableError()
        self._check_col(col)
        return self.min_values[col]

    def max_value(self, col: int) -> Optional[float]:
        if not self.has_statistics:
            raise StatisticsUnavailableError()
        self._check_col(col)
        return self.max_values[col]

    def __repr__(self):
        return (
            f"DataFrame(features={list(self.feature_names)}, rows={self.row_count}, "
            f"cols={self.col_count}, source={self.source!r})"
        )
