# spectroscope/stats/inputs.py - Comparison input files
"""
Loaders for the per-snapshot inputs of the comparators.

Category count files hold one category per line:

    <id> <count> <name>

Edge latency files hold a sparse matrix as 1-based triplets:

    <row> <col> <latency_us>

where a row is one structurally aligned edge and its non-zero entries are the
individual latency observations for that edge.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

import numpy as np
from scipy import sparse

from spectroscope.exceptions import InputFormatError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryRow:
    """
    One line of a category count file.
    """
    category_id: int
    count: int
    name: str


@dataclass
class CategoryCount:
    """
    Observed counts of one category in both snapshots. in_s0 and in_s1 are
    False when the category was absent from that snapshot's count file.
    """
    category_id: int
    name: str
    s0_count: int
    s1_count: int
    in_s0: bool = True
    in_s1: bool = True


def _read_lines(path: str) -> Iterable[Tuple[int, str]]:
    with open(path, 'r') as f:
        for line_number, line in enumerate(f, 1):
            if line.strip():
                yield line_number, line


def load_category_counts(path: str) -> List[CategoryRow]:
    """
    Load a category count file.

    Args:
        path: Path to the count file

    Returns:
        List of CategoryRow in file order

    Raises:
        OSError: If the file cannot be read
        InputFormatError: If a line is malformed or an id repeats
    """
    rows = []
    seen = set()

    for line_number, line in _read_lines(path):
        fields = line.split(None, 2)
        if len(fields) != 3:
            raise InputFormatError(path, line_number, line, "expected '<id> <count> <name>'")

        try:
            category_id = int(fields[0])
            count = int(fields[1])
        except ValueError:
            raise InputFormatError(path, line_number, line, "id and count must be integers") from None

        if count < 0:
            raise InputFormatError(path, line_number, line, "count must be non-negative")
        if category_id in seen:
            raise InputFormatError(path, line_number, line, f"duplicate category id {category_id}")

        seen.add(category_id)
        rows.append(CategoryRow(category_id, count, fields[2].strip()))

    logger.debug(f"Loaded {len(rows)} categories from {path}")
    return rows


def align_category_counts(s0_rows: Sequence[CategoryRow],
                          s1_rows: Sequence[CategoryRow]) -> List[CategoryCount]:
    """
    Pair up the two snapshots' count tables by category id.

    A category missing from one snapshot gets a count of 0 there. The result
    follows s0's order, with categories only seen in s1 appended.

    Args:
        s0_rows: Baseline count table
        s1_rows: Comparison count table

    Returns:
        List of CategoryCount
    """
    s1_by_id = {row.category_id: row for row in s1_rows}
    aligned = []

    for row in s0_rows:
        other = s1_by_id.pop(row.category_id, None)
        if other is None:
            logger.warning(f"Category {row.category_id} ({row.name}) missing from s1; using count 0")
            aligned.append(CategoryCount(row.category_id, row.name, row.count, 0, in_s1=False))
            continue

        if other.name != row.name:
            logger.warning(f"Category {row.category_id} is named {row.name!r} in s0 "
                           f"but {other.name!r} in s1")
        aligned.append(CategoryCount(row.category_id, row.name, row.count, other.count))

    for row in s1_by_id.values():
        logger.warning(f"Category {row.category_id} ({row.name}) missing from s0; using count 0")
        aligned.append(CategoryCount(row.category_id, row.name, 0, row.count, in_s0=False))

    return aligned


class SparseLatencyTable:
    """
    Edge latency observations of one snapshot, indexed by 1-based edge row.

    Backed by a scipy CSR matrix. Duplicate (row, col) triplets are summed and
    zero entries are not observations, but every row index that appears in
    the input counts toward num_rows.
    """

    def __init__(self, matrix: Optional[sparse.spmatrix] = None):
        """
        Initialize the table.

        Args:
            matrix: Sparse matrix whose rows are edges (0-based)
        """
        if matrix is None:
            matrix = sparse.csr_matrix((0, 0))
        self._matrix = sparse.csr_matrix(matrix)
        self._matrix.sum_duplicates()

    @classmethod
    def from_triplets(cls, rows: Sequence[int], cols: Sequence[int],
                      values: Sequence[float]) -> 'SparseLatencyTable':
        """Build a table from 1-based (row, col, value) triplets."""
        if len(rows) == 0:
            return cls()

        row_idx = np.asarray(rows, dtype=int) - 1
        col_idx = np.asarray(cols, dtype=int) - 1
        shape = (int(row_idx.max()) + 1, int(col_idx.max()) + 1)

        matrix = sparse.coo_matrix((np.asarray(values, dtype=float), (row_idx, col_idx)), shape=shape)
        return cls(matrix.tocsr())

    @classmethod
    def from_rows(cls, rows: Mapping[int, Sequence[float]]) -> 'SparseLatencyTable':
        """Build a table from a mapping of 1-based row index to latencies."""
        triplet_rows, triplet_cols, values = [], [], []

        for row_index, latencies in rows.items():
            if not latencies:
                # Keep the row in range even without observations
                triplet_rows.append(row_index)
                triplet_cols.append(1)
                values.append(0.0)
                continue

            for col_index, latency in enumerate(latencies, 1):
                triplet_rows.append(row_index)
                triplet_cols.append(col_index)
                values.append(latency)

        return cls.from_triplets(triplet_rows, triplet_cols, values)

    @property
    def num_rows(self) -> int:
        return self._matrix.shape[0]

    def row(self, index: int) -> np.ndarray:
        """
        Get the latency observations of one edge row.

        Args:
            index: 1-based row index

        Returns:
            Array of non-zero latencies; empty if the row has none or is
            out of range
        """
        if index < 1 or index > self.num_rows:
            return np.empty(0)

        start, end = self._matrix.indptr[index - 1], self._matrix.indptr[index]
        data = self._matrix.data[start:end]

        return data[data != 0]

    def rows(self) -> Dict[int, np.ndarray]:
        """All non-empty rows keyed by 1-based index."""
        result = {}
        for index in range(1, self.num_rows + 1):
            data = self.row(index)
            if data.size:
                result[index] = data
        return result


def load_sparse_latencies(path: str) -> SparseLatencyTable:
    """
    Load a sparse edge latency file.

    Args:
        path: Path to the triplet file

    Returns:
        SparseLatencyTable for the snapshot

    Raises:
        OSError: If the file cannot be read
        InputFormatError: If a line is malformed
    """
    rows, cols, values = [], [], []

    for line_number, line in _read_lines(path):
        fields = line.split()
        if len(fields) != 3:
            raise InputFormatError(path, line_number, line, "expected '<row> <col> <value>'")

        try:
            row, col, value = (float(field) for field in fields)
        except ValueError:
            raise InputFormatError(path, line_number, line, "fields must be numeric") from None

        if row < 1 or col < 1 or not row.is_integer() or not col.is_integer():
            raise InputFormatError(path, line_number, line, "row and col must be positive integers")

        rows.append(int(row))
        cols.append(int(col))
        values.append(value)

    table = SparseLatencyTable.from_triplets(rows, cols, values)
    logger.debug(f"Loaded {len(values)} latency entries over {table.num_rows} rows from {path}")

    return table
