# spectroscope/exporters/json_exporter.py - JSON format exporter
"""
Exports comparison results as JSON files.
"""

import json
from dataclasses import asdict
from pathlib import Path
from datetime import datetime
from typing import List, Optional
import logging

from spectroscope.stats.category_comparator import CategoryComparison
from spectroscope.stats.edge_comparator import EdgeComparisonResult


class JSONExporter:
    """
    Exports comparison results to JSON format.

    Provides structured JSON output for further processing or visualization.
    """

    def __init__(self, output_dir: Optional[str] = None):
        """
        Initialize the JSON exporter.

        Args:
            output_dir: Directory to save JSON files (default: current directory)
        """
        self.output_dir = Path(output_dir) if output_dir else Path('.')
        self.logger = logging.getLogger(__name__)

        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _write(self, payload: dict, filename: str) -> str:
        output_path = self.output_dir / filename

        with open(output_path, 'w') as f:
            json.dump({'timestamp': datetime.now().isoformat(), **payload}, f, indent=2)

        return str(output_path)

    def export_category_comparison(self, comparison: CategoryComparison,
                                   filename: Optional[str] = None) -> str:
        """
        Export a category comparison to JSON file.

        Args:
            comparison: Category comparison result
            filename: Output filename (auto-generated if not provided)

        Returns:
            Path to output file
        """
        if not filename:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filename = f'categories_{timestamp}.json'

        data = asdict(comparison)
        data['test_id'] = comparison.TEST_ID
        data['flag'] = comparison.flag

        output_path = self._write({'categories': data}, filename)
        self.logger.info(f"Exported category comparison to {output_path}")
        return output_path

    def export_edge_results(self, results: List[EdgeComparisonResult],
                            filename: Optional[str] = None) -> str:
        """
        Export edge results to JSON file.

        Args:
            results: Edge results in row order
            filename: Output filename (auto-generated if not provided)

        Returns:
            Path to output file
        """
        if not filename:
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            filename = f'edges_{timestamp}.json'

        edges_data = []
        for result in results:
            edge_dict = asdict(result)
            edge_dict['decision'] = result.decision.value
            edge_dict['flag'] = result.flag
            edges_data.append(edge_dict)

        output_path = self._write({'edge_count': len(edges_data), 'edges': edges_data}, filename)
        self.logger.info(f"Exported {len(edges_data)} edge results to {output_path}")
        return output_path
