# spectroscope/exporters/stdout.py - Console output exporter
"""
Prints comparison results to stdout in human-readable format.
"""

from typing import List
from colorama import Fore, Style, init
import logging

from spectroscope.stats.category_comparator import CategoryComparison
from spectroscope.stats.edge_comparator import EdgeComparisonResult, EdgeDecision
from spectroscope.utils.helpers import format_duration


# Initialize colorama
init(autoreset=True)


class StdoutExporter:
    """
    Prints comparison results to stdout with colored output.
    """

    def __init__(self, use_colors: bool = True):
        """
        Initialize the stdout exporter.

        Args:
            use_colors: Whether to use colored output
        """
        self.use_colors = use_colors
        self.logger = logging.getLogger(__name__)

    def _color(self, color: str) -> str:
        return color if self.use_colors else ""

    def _reset(self) -> str:
        return Style.RESET_ALL if self.use_colors else ""

    def _header(self, title: str):
        print(f"\n{self._color(Fore.CYAN)}{'='*80}{self._reset()}")
        print(f"{self._color(Fore.CYAN)}{title}{self._reset()}")
        print(f"{self._color(Fore.CYAN)}{'='*80}{self._reset()}\n")

    def print_category_comparison(self, comparison: CategoryComparison, limit: int = 10):
        """
        Print a category comparison to stdout.

        Args:
            comparison: Category comparison result
            limit: Maximum number of contributing categories to list
        """
        self._header("Category Comparison")

        if comparison.indeterminate:
            verdict = f"{self._color(Fore.YELLOW)}indeterminate{self._reset()}"
        elif comparison.reject_null:
            verdict = f"{self._color(Fore.RED)}distributions differ{self._reset()}"
        else:
            verdict = f"{self._color(Fore.GREEN)}no significant difference{self._reset()}"

        print(f"  Result: {verdict}")
        print(f"  Chi-squared: {comparison.statistic:.2f} (df={comparison.degrees_of_freedom})")
        print(f"  p-value: {comparison.p_value:g}")
        print(f"  Categories dropped (low s0 count): {len(comparison.dropped_ids)}")

        if comparison.contributions:
            print(f"\n{'Category':<10} {'Name':<30} {'s0':>8} {'s1':>8} {'Contribution':>14}")
            print(f"{'-'*80}")

            for entry in comparison.contributions[:limit]:
                print(f"{entry.category_id:<10} {entry.name[:30]:<30} "
                      f"{entry.s0_count:>8} {entry.s1_count:>8} {entry.contribution:>14.2f}")

        print()

    def print_edge_results(self, results: List[EdgeComparisonResult], limit: int = 20):
        """
        Print edge results to stdout; rejected rows first.

        Args:
            results: Edge results in row order
            limit: Maximum number of rows to list
        """
        self._header("Edge Latency Comparison")

        rejected = [r for r in results if r.reject_null]
        sentinels = [r for r in results if r.is_sentinel]

        print(f"  Rows compared: {len(results)}")
        print(f"  Rows tested: {len(results) - len(sentinels)}")
        print(f"  Rows rejecting the null hypothesis: {len(rejected)}")

        shown = rejected + [r for r in results if not r.reject_null]
        if shown:
            print(f"\n{'Row':<6} {'Outcome':<20} {'p-value':>10} {'s0 mean':>12} {'s1 mean':>12}")
            print(f"{'-'*80}")

            for result in shown[:limit]:
                color = self._get_decision_color(result)
                print(f"{result.row:<6} "
                      f"{color}{result.decision.value:<20}{self._reset()} "
                      f"{result.p_value:>10.4f} "
                      f"{format_duration(result.s0_mean):>12} "
                      f"{format_duration(result.s1_mean):>12}")

            if len(shown) > limit:
                print(f"\n{self._color(Fore.YELLOW)}... and {len(shown) - limit} more rows{self._reset()}")

        print()

    def _get_decision_color(self, result: EdgeComparisonResult) -> str:
        """
        Get color based on an edge outcome.

        Args:
            result: Edge result

        Returns:
            Color code
        """
        if not self.use_colors:
            return ""

        if result.reject_null:
            return Fore.RED
        elif result.decision is EdgeDecision.TESTED:
            return Fore.GREEN
        else:
            return Fore.YELLOW
