# spectroscope/exporters/text_exporter.py - Fixed-format result files
"""
Writes comparison results in the fixed text formats read by the cluster
explanation tools.

Category result:  <test_id> <reject> <p_value> -1.00 -1.00 -1.00 -1.00
Edge result:      <row> <reject> <p_value> <s0_mean> <s0_std> <s1_mean> <s1_std>

Sentinel p-values are written with two decimals, computed ones with six.
"""

from typing import List
import logging

from spectroscope.stats.category_comparator import CategoryComparison
from spectroscope.stats.edge_comparator import EdgeComparisonResult
from spectroscope.utils.helpers import ensure_parent_dir


PLACEHOLDER = -1.0

logger = logging.getLogger(__name__)


def format_category_line(comparison: CategoryComparison) -> str:
    placeholders = " ".join(f"{PLACEHOLDER:.2f}" for _ in range(4))
    return f"{comparison.TEST_ID} {comparison.flag} {comparison.p_value:f} {placeholders}"


def format_edge_line(result: EdgeComparisonResult) -> str:
    p_value = f"{result.p_value:.2f}" if result.is_sentinel else f"{result.p_value:f}"
    return (f"{result.row} {result.flag} {p_value} "
            f"{result.s0_mean:.2f} {result.s0_std:.2f} {result.s1_mean:.2f} {result.s1_std:.2f}")


class TextExporter:
    """
    Writes result and statistics files.
    """

    def write_category_result(self, comparison: CategoryComparison, output_file: str) -> str:
        """
        Write the one-line category test result.

        Args:
            comparison: Category comparison result
            output_file: Destination path

        Returns:
            Path to output file
        """
        path = ensure_parent_dir(output_file)
        with open(path, 'w') as f:
            f.write(format_category_line(comparison) + "\n")

        logger.info(f"Wrote category result to {path}")
        return str(path)

    def write_edge_results(self, results: List[EdgeComparisonResult], output_file: str) -> str:
        """
        Write one line per edge row, in row order.

        Args:
            results: Edge results
            output_file: Destination path

        Returns:
            Path to output file
        """
        path = ensure_parent_dir(output_file)
        with open(path, 'w') as f:
            for result in sorted(results, key=lambda r: r.row):
                f.write(format_edge_line(result) + "\n")

        logger.info(f"Wrote {len(results)} edge results to {path}")
        return str(path)

    def write_report(self, report: str, stats_file: str) -> str:
        """
        Write a statistics report.

        Args:
            report: Report text
            stats_file: Destination path

        Returns:
            Path to output file
        """
        path = ensure_parent_dir(stats_file)
        with open(path, 'w') as f:
            f.write(report)

        logger.info(f"Wrote statistics to {path}")
        return str(path)
