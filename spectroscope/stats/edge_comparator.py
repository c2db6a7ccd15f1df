# spectroscope/stats/edge_comparator.py - Per-edge latency comparison
"""
Compares, edge row by edge row, the latency distributions of two snapshots.

Rows with missing or too little data are not tested; they get a sentinel
p-value that says why:

     0  no data in either snapshot
    -1  edge only seen in s1
    -2  edge only seen in s0
    -3  too few observations for the distribution test

Otherwise both latency sets are converted to whole milliseconds and compared
with a one-sided two-sample Kolmogorov-Smirnov test whose alternative is that
s1's latencies are stochastically larger than s0's.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence
import logging

import numpy as np
from scipy import stats

from spectroscope.stats.inputs import SparseLatencyTable, load_sparse_latencies
from spectroscope.utils.helpers import mean_and_std, round_half_away


class EdgeDecision(Enum):
    """Which branch produced an edge result"""
    NO_DATA = 'no_data'
    ONLY_IN_S1 = 'only_in_s1'
    ONLY_IN_S0 = 'only_in_s0'
    INSUFFICIENT_DATA = 'insufficient_data'
    TESTED = 'tested'


SENTINEL_P_VALUES = {
    EdgeDecision.NO_DATA: 0.0,
    EdgeDecision.ONLY_IN_S1: -1.0,
    EdgeDecision.ONLY_IN_S0: -2.0,
    EdgeDecision.INSUFFICIENT_DATA: -3.0,
}


@dataclass
class EdgeComparisonResult:
    """
    Comparison result for one edge row. Means and standard deviations are
    of the raw latencies in microseconds.
    """
    row: int
    decision: EdgeDecision
    reject_null: bool
    p_value: float
    s0_mean: float = 0.0
    s0_std: float = 0.0
    s1_mean: float = 0.0
    s1_std: float = 0.0
    s0_samples: int = 0
    s1_samples: int = 0

    @property
    def flag(self) -> int:
        """1 if the null hypothesis is rejected, else 0"""
        return 1 if self.reject_null else 0

    @property
    def is_sentinel(self) -> bool:
        """True when no distribution test was run for this row"""
        return self.decision is not EdgeDecision.TESTED


class EdgeLatencyComparator:
    """
    Two-sample comparison of per-edge latency distributions.

    Rows are independent of each other; with workers > 1 they are computed
    on a thread pool, but results are always returned in row order.
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize the comparator.

        Args:
            config: Optional 'edges' configuration section
        """
        self.config = config or {}
        self.logger = logging.getLogger(__name__)

        self.significance = self.config.get('significance', 0.05)
        self.smoothing_divisor = self.config.get('smoothing_divisor', 1000)
        self.min_effective_sample = self.config.get('min_effective_sample', 4)
        self.epsilon = self.config.get('epsilon', 0.0001)
        self.alternative = self.config.get('alternative', 'greater')
        self.workers = max(1, int(self.config.get('workers', 1)))

    def effective_sample_size(self, s0_size: int, s1_size: int) -> float:
        """|L0||L1| / (|L0| + |L1| + eps)"""
        return s0_size * s1_size / (s0_size + s1_size + self.epsilon)

    def smooth(self, latencies: np.ndarray) -> np.ndarray:
        """Convert microseconds to whole milliseconds."""
        return round_half_away(np.asarray(latencies, dtype=float) / self.smoothing_divisor)

    def compare_row(self, row: int, s0_latencies: Sequence[float],
                    s1_latencies: Sequence[float]) -> EdgeComparisonResult:
        """
        Compare the latency sets of one edge row.

        Args:
            row: 1-based edge row index
            s0_latencies: Baseline observations (may be empty)
            s1_latencies: Comparison observations (may be empty)

        Returns:
            EdgeComparisonResult for the row
        """
        l0 = np.asarray(s0_latencies, dtype=float)
        l1 = np.asarray(s1_latencies, dtype=float)

        s0_mean, s0_std = mean_and_std(l0)
        s1_mean, s1_std = mean_and_std(l1)

        def sentinel(decision):
            return EdgeComparisonResult(
                row=row, decision=decision, reject_null=False,
                p_value=SENTINEL_P_VALUES[decision],
                s0_mean=s0_mean, s0_std=s0_std, s1_mean=s1_mean, s1_std=s1_std,
                s0_samples=l0.size, s1_samples=l1.size,
            )

        if l0.size == 0 and l1.size == 0:
            # Usually an RPC whose call/reply pair was never instrumented
            return sentinel(EdgeDecision.NO_DATA)

        if l0.size == 0:
            return sentinel(EdgeDecision.ONLY_IN_S1)

        if l1.size == 0:
            return sentinel(EdgeDecision.ONLY_IN_S0)

        if self.effective_sample_size(l0.size, l1.size) < self.min_effective_sample:
            return sentinel(EdgeDecision.INSUFFICIENT_DATA)

        result = stats.ks_2samp(self.smooth(l0), self.smooth(l1), alternative=self.alternative)
        p_value = float(result.pvalue)

        return EdgeComparisonResult(
            row=row, decision=EdgeDecision.TESTED,
            reject_null=p_value < self.significance, p_value=p_value,
            s0_mean=s0_mean, s0_std=s0_std, s1_mean=s1_mean, s1_std=s1_std,
            s0_samples=l0.size, s1_samples=l1.size,
        )

    def compare(self, s0: SparseLatencyTable, s1: SparseLatencyTable) -> List[EdgeComparisonResult]:
        """
        Compare every edge row of two snapshots.

        Args:
            s0: Baseline latency table
            s1: Comparison latency table

        Returns:
            One EdgeComparisonResult per row, rows 1..max(num_rows) in order
        """
        max_rows = max(s0.num_rows, s1.num_rows)
        indices = range(1, max_rows + 1)
        self.logger.info(f"Comparing {max_rows} edge rows")

        def run(row):
            return self.compare_row(row, s0.row(row), s1.row(row))

        if self.workers > 1 and max_rows > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(run, indices))
        else:
            results = [run(row) for row in indices]

        for result in results:
            self.logger.debug(f"Edge {result.row}: {result.decision.value} p={result.p_value:g}")

        rejected = sum(r.reject_null for r in results)
        self.logger.info(f"Edge test: {rejected} of {len(results)} rows reject the null hypothesis")

        return results

    def compare_files(self, s0_file: str, s1_file: str) -> List[EdgeComparisonResult]:
        """
        Load two sparse latency files and compare them.

        Args:
            s0_file: Baseline latency file
            s1_file: Comparison latency file

        Returns:
            List of EdgeComparisonResult in row order
        """
        return self.compare(load_sparse_latencies(s0_file), load_sparse_latencies(s1_file))
