# spectroscope/__init__.py - Snapshot comparison of request-flow graphs
"""
spectroscope compares two snapshots ("s0" baseline, "s1" comparison) of a
distributed system's request-flow graphs. It tests whether request
categories occur with different frequencies and whether individual call
edges got slower.
"""

__version__ = "0.1.0"
