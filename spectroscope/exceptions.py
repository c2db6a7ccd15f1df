# spectroscope/exceptions.py - Error hierarchy
"""
Exceptions raised by spectroscope.

Graph invariant violations are programming or data-contract errors and abort
the current operation. Missing or insufficient statistical data is never an
exception; the comparators encode it as sentinel values instead.
"""


class SpectroscopeError(Exception):
    """Base exception for spectroscope."""


class GraphInvariantError(SpectroscopeError):
    """A request-flow graph invariant was violated."""


class DuplicateEdgeError(GraphInvariantError):
    """A second latency was supplied for the same (parent, child) pair."""

    def __init__(self, parent_id: str, child_id: str):
        super().__init__(f"Duplicate edge latency for {parent_id} -> {child_id}")
        self.parent_id = parent_id
        self.child_id = child_id


class NodeNotFoundError(GraphInvariantError, KeyError):
    """A node id is not part of the graph."""

    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id

    def __str__(self):
        return self.args[0]


class EdgeNotFoundError(GraphInvariantError, KeyError):
    """No latency is recorded for a (parent, child) pair."""

    def __init__(self, parent_id: str, child_id: str):
        super().__init__(f"Edge not found: {parent_id} -> {child_id}")
        self.parent_id = parent_id
        self.child_id = child_id

    def __str__(self):
        return self.args[0]


class GraphStateError(GraphInvariantError):
    """An operation is not valid in the graph's current lifecycle state."""


class InputFormatError(SpectroscopeError):
    """A line of an input count or latency file could not be parsed."""

    def __init__(self, path: str, line_number: int, line: str, reason: str):
        super().__init__(f"{path}:{line_number}: {reason}: {line.strip()!r}")
        self.path = path
        self.line_number = line_number
        self.line = line
