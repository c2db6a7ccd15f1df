# spectroscope/stats/report_generator.py - Report generation
"""
Generates human-readable reports from comparison results.
"""

from collections import Counter
from typing import List
import logging

from spectroscope.stats.category_comparator import CategoryComparison
from spectroscope.stats.edge_comparator import EdgeComparisonResult, EdgeDecision


class ReportGenerator:
    """
    Generates the statistics reports that accompany the result files.
    """

    def __init__(self):
        """
        Initialize the report generator.
        """
        self.logger = logging.getLogger(__name__)

    def generate_category_report(self, comparison: CategoryComparison) -> str:
        """
        Generate the category statistics report.

        Args:
            comparison: Category comparison result

        Returns:
            Report text with small-category fractions, the decision and the
            per-category contributions, largest first
        """
        lines = []
        lines.append(f"Number of categories w/less than five items originally: "
                     f"{comparison.s0_small_fraction:g} {comparison.s1_small_fraction:g}")
        lines.append(f"reject-null: {comparison.flag} p-value: {comparison.p_value:.2f}")

        if comparison.indeterminate:
            lines.append(f"indeterminate: {len(comparison.contributions)} categories "
                         f"left after filtering, degrees of freedom {comparison.degrees_of_freedom}")
        lines.append("")

        for entry in comparison.contributions:
            lines.append(f"{entry.category_id}, {entry.s0_count}, {entry.s1_count}, "
                         f"{entry.contribution:.2f}")
            lines.append("")

        return "\n".join(lines) + "\n"

    def generate_edge_report(self, results: List[EdgeComparisonResult]) -> str:
        """
        Generate a summary of an edge comparison.

        Args:
            results: Edge results in row order

        Returns:
            Report text with the number of rows per outcome and the rejected rows
        """
        decisions = Counter(r.decision for r in results)
        rejected = [r for r in results if r.reject_null]

        lines = []
        lines.append(f"Edge rows compared: {len(results)}")
        for decision in EdgeDecision:
            lines.append(f"  {decision.value}: {decisions.get(decision, 0)}")
        lines.append(f"Rows rejecting the null hypothesis: {len(rejected)}")

        for result in rejected:
            lines.append(f"  row {result.row}: p-value {result.p_value:f}, "
                         f"s0 {result.s0_mean:.2f}us -> s1 {result.s1_mean:.2f}us")

        return "\n".join(lines) + "\n"
