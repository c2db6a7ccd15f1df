# spectroscope/stats/category_comparator.py - Category count comparison
"""
Compares how often each request category occurs in two snapshots.

The s0 counts act as the expected frequencies of a chi-squared goodness of
fit test and the s1 counts as the observed ones. Categories whose smoothed
s0 count is too small for the chi-squared approximation are dropped first.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

import numpy as np
from scipy import stats

from spectroscope.stats.inputs import CategoryCount, align_category_counts, load_category_counts


@dataclass
class CategoryContribution:
    """
    One retained category and its share of the chi-squared statistic.
    Counts are the smoothed counts the test used.
    """
    category_id: int
    name: str
    s0_count: int
    s1_count: int
    contribution: float


@dataclass
class CategoryComparison:
    """
    Result of a category comparison.
    """
    reject_null: bool
    p_value: float
    statistic: float
    degrees_of_freedom: int
    s0_small_fraction: float
    s1_small_fraction: float
    contributions: List[CategoryContribution] = field(default_factory=list)
    dropped_ids: List[int] = field(default_factory=list)
    indeterminate: bool = False

    TEST_ID = 1

    @property
    def flag(self) -> int:
        """1 if the null hypothesis is rejected, else 0"""
        return 1 if self.reject_null else 0


class CategoryComparator:
    """
    Chi-squared comparison of per-category request counts.
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Initialize the comparator.

        Args:
            config: Optional 'categories' configuration section
        """
        self.config = config or {}
        self.logger = logging.getLogger(__name__)

        self.smoothing = self.config.get('smoothing', 1)
        self.min_expected_count = self.config.get('min_expected_count', 5)
        self.significance = self.config.get('significance', 0.05)

    def _small_fraction(self, smoothed: np.ndarray) -> float:
        if smoothed.size == 0:
            return 0.0
        return float(np.mean(smoothed <= self.min_expected_count))

    def compare(self, counts: Sequence[CategoryCount]) -> CategoryComparison:
        """
        Run the chi-squared test over aligned category counts.

        Args:
            counts: Aligned per-category counts of both snapshots

        Returns:
            CategoryComparison with the decision and per-category contributions
        """
        ids = np.array([c.category_id for c in counts], dtype=int)
        s0 = np.array([c.s0_count for c in counts], dtype=float) + self.smoothing
        s1 = np.array([c.s1_count for c in counts], dtype=float) + self.smoothing

        # Each fraction covers only the categories that snapshot's table listed
        in_s0 = np.array([c.in_s0 for c in counts], dtype=bool)
        in_s1 = np.array([c.in_s1 for c in counts], dtype=bool)
        s0_small_fraction = self._small_fraction(s0[in_s0])
        s1_small_fraction = self._small_fraction(s1[in_s1])

        keep = s0 > self.min_expected_count
        dropped_ids = [int(i) for i in ids[~keep]]
        if dropped_ids:
            self.logger.info(f"Dropping {len(dropped_ids)} categories with s0 count <= "
                             f"{self.min_expected_count}")

        kept = [c for c, k in zip(counts, keep) if k]
        s0_kept = s0[keep]
        s1_kept = s1[keep]

        contributions = (s1_kept - s0_kept) ** 2 / s0_kept
        statistic = float(contributions.sum())
        degrees_of_freedom = len(kept) - 1

        indeterminate = degrees_of_freedom < 1
        if indeterminate:
            # chi2 with df <= 0 has no usable distribution; accept by default
            self.logger.warning(f"Only {len(kept)} categories left after filtering; "
                                f"category test is indeterminate")
            p_value = 1.0
        else:
            p_value = float(stats.chi2.sf(statistic, degrees_of_freedom))

        reject_null = (not indeterminate) and p_value < self.significance

        order = np.argsort(-contributions, kind='stable')
        ranked = [
            CategoryContribution(
                category_id=kept[i].category_id,
                name=kept[i].name,
                s0_count=int(s0_kept[i]),
                s1_count=int(s1_kept[i]),
                contribution=float(contributions[i]),
            )
            for i in order
        ]

        for entry in ranked:
            self.logger.debug(f"Category {entry.category_id} ({entry.name}): "
                              f"{entry.s0_count} -> {entry.s1_count}, contribution {entry.contribution:.2f}")

        self.logger.info(f"Category test: chi2={statistic:.2f} df={degrees_of_freedom} "
                         f"p={p_value:g} reject={reject_null}")

        return CategoryComparison(
            reject_null=reject_null,
            p_value=p_value,
            statistic=statistic,
            degrees_of_freedom=degrees_of_freedom,
            s0_small_fraction=s0_small_fraction,
            s1_small_fraction=s1_small_fraction,
            contributions=ranked,
            dropped_ids=dropped_ids,
            indeterminate=indeterminate,
        )

    def compare_files(self, s0_counts_file: str, s1_counts_file: str) -> CategoryComparison:
        """
        Load two category count files and compare them.

        Args:
            s0_counts_file: Baseline count file
            s1_counts_file: Comparison count file

        Returns:
            CategoryComparison
        """
        s0_rows = load_category_counts(s0_counts_file)
        s1_rows = load_category_counts(s1_counts_file)
        self.logger.info(f"Comparing {len(s0_rows)} s0 categories against {len(s1_rows)} s1 categories")

        return self.compare(align_category_counts(s0_rows, s1_rows))
