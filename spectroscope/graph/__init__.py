# spectroscope/graph/__init__.py - Request-flow graph module
"""
Request-flow graph model.

This module provides:
- structured_graph.py: Node, GraphBuilder and the finalized RequestGraph
- dot_format.py: Reading and writing the textual graph format
"""

from spectroscope.graph.structured_graph import GraphBuilder, Node, RequestGraph, new_builder
from spectroscope.graph.dot_format import build_from_text, parse_node_names, serialize, split_graphs

__all__ = [
    'GraphBuilder',
    'Node',
    'RequestGraph',
    'new_builder',
    'build_from_text',
    'parse_node_names',
    'serialize',
    'split_graphs',
]
