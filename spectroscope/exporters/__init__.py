# spectroscope/exporters/__init__.py - Exporters module
"""
Exporters for outputting comparison results in various formats.

This module provides:
- text_exporter.py: Fixed-format result and statistics files
- json_exporter.py: JSON format exporter
- stdout.py: Console output exporter
"""
