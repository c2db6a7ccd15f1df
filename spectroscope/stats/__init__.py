# spectroscope/stats/__init__.py - Snapshot comparison module
"""
Statistical comparison of two snapshots.

This module provides:
- inputs.py: Category count and sparse edge latency loaders
- category_comparator.py: Chi-squared test over category counts
- edge_comparator.py: Per-edge latency distribution test
- report_generator.py: Statistics reports
"""
