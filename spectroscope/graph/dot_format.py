# spectroscope/graph/dot_format.py - Textual graph interchange format
"""
Reads and writes request-flow graphs in their DOT-like text form:

    Digraph 12 {
    12.1 [label="NFS3_READ_CALL_TYPE\\n"]
    12.2 [label="NFS3_READ_REPLY_TYPE\\n"]
    12.1 -> 12.2 [label="R: 350.000000 us"]
    }

Node ids are treated as opaque strings.
"""

import math
import re
from typing import Dict, Iterator, List, Mapping, Optional, Tuple
import logging

from spectroscope.graph.structured_graph import GraphBuilder, RequestGraph


logger = logging.getLogger(__name__)

EDGE_PATTERN = re.compile(
    r'^\s*([^\s\[\]]+)\s*->\s*([^\s\[\]]+)\s*'
    r'\[label="R:\s*((?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)\s*us"\]'
)
NODE_PATTERN = re.compile(r'^\s*([^\s\[\]]+)\s*\[label="((?:[^"\\]|\\.)*)"\]')
HEADER_PATTERN = re.compile(r'^\s*Digraph\s+([^\s{]+)\s*\{', re.IGNORECASE)

LABEL_LINE_BREAK = '\\n'


def _escape_label(name: str) -> str:
    return name.replace('\\', '\\\\').replace('"', '\\"')


def _unescape_label(label: str) -> str:
    # Only the first line of a label is the node's name
    chars = []
    for match in re.finditer(r'\\(.)|(.)', label, re.DOTALL):
        escaped, plain = match.groups()
        if escaped == 'n':
            break
        chars.append(plain if escaped is None else escaped)
    return ''.join(chars)


def _format_latency(latency: float) -> str:
    text = f"{latency:f}"
    if float(text) != latency:
        text = repr(latency)
    return text


def parse_node_names(description: str) -> Dict[str, str]:
    """
    Collect the node declarations of a graph description.

    Args:
        description: Graph text

    Returns:
        Dictionary mapping node ids to display names, in declaration order
    """
    names = {}

    for line in description.splitlines():
        match = NODE_PATTERN.match(line)
        if match:
            names[match.group(1)] = _unescape_label(match.group(2))

    return names


def build_from_text(description: str, names: Optional[Mapping[str, str]] = None,
                    graph_id: Optional[str] = None) -> RequestGraph:
    """
    Build a finalized graph from its edge description.

    The source of the first matching edge becomes the root, so the text is
    expected to list edges depth-first. Declared nodes without edges are kept; other lines
    that match neither form are skipped.

    Args:
        description: Graph text containing edge statements
        names: Node id -> display name table; read from the node
            declarations of the description when omitted
        graph_id: Graph id; taken from the Digraph header when omitted

    Returns:
        The finalized RequestGraph

    Raises:
        DuplicateEdgeError: If an edge appears twice
    """
    if names is None:
        names = parse_node_names(description)

    header_id = None
    declared: List[str] = []
    skipped = 0
    edges: List[Tuple[str, str, float]] = []

    for line in description.splitlines():
        edge = EDGE_PATTERN.match(line)
        if edge:
            latency = float(edge.group(3))
            if math.isfinite(latency):
                edges.append((edge.group(1), edge.group(2), latency))
            else:
                skipped += 1
            continue

        node = NODE_PATTERN.match(line)
        if node:
            declared.append(node.group(1))
            continue

        header = HEADER_PATTERN.match(line)
        if header:
            if header_id is None:
                header_id = header.group(1)
            continue

        if line.strip() not in ('', '}'):
            skipped += 1

    if skipped:
        logger.debug(f"Skipped {skipped} unrecognized lines while parsing graph")

    builder = GraphBuilder(graph_id if graph_id is not None else (header_id or "0"))

    seen = set()
    root_id = None

    def ensure(node_id):
        if node_id not in seen:
            seen.add(node_id)
            name = names.get(node_id)
            if name is None:
                logger.debug(f"No name for node {node_id}; using its id")
                name = node_id
            builder.add_node(node_id, name)

    for src_id, dst_id, latency in edges:
        ensure(src_id)
        ensure(dst_id)
        if root_id is None:
            root_id = src_id
            builder.set_root(root_id)
        builder.add_existing_child(src_id, dst_id, latency)

    # Declared nodes without edges, e.g. a lone root
    for node_id in declared:
        ensure(node_id)
    if root_id is None and declared:
        builder.set_root(declared[0])

    return builder.finalize()


def _start_nodes(graph: RequestGraph) -> List[str]:
    if not graph.has_root:
        return graph.node_ids()

    root_id = graph.root_id()
    return [root_id] + [node_id for node_id in graph.node_ids() if node_id != root_id]


def walk_nodes(graph: RequestGraph) -> Iterator[str]:
    """
    Iterate node ids depth-first from the root, each exactly once.

    Nodes not reachable from the root follow, in insertion order.
    """
    visited = set()

    for start in _start_nodes(graph):
        if start in visited:
            continue

        stack = [start]
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)
            yield node_id
            stack.extend(reversed(graph.children(node_id)))


def walk_edges(graph: RequestGraph) -> Iterator[Tuple[str, str]]:
    """
    Iterate edges depth-first from the root.

    Every edge into a shared node is produced, but the shared node's own
    outgoing edges are only walked the first time it is reached.
    """
    visited = set()

    for start in _start_nodes(graph):
        if start in visited:
            continue

        visited.add(start)
        stack = [(start, child_id) for child_id in reversed(graph.children(start))]

        while stack:
            src_id, dst_id = stack.pop()
            yield src_id, dst_id

            if dst_id in visited:
                continue
            visited.add(dst_id)
            stack.extend((dst_id, child_id) for child_id in reversed(graph.children(dst_id)))


def serialize(graph: RequestGraph) -> str:
    """
    Write a graph back to its text form.

    Args:
        graph: Finalized graph

    Returns:
        Graph text, node declarations first, then edges depth-first
    """
    lines = [f"Digraph {graph.graph_id} {{"]

    for node_id in walk_nodes(graph):
        lines.append(f'{node_id} [label="{_escape_label(graph.name(node_id))}{LABEL_LINE_BREAK}"]')

    for src_id, dst_id in walk_edges(graph):
        latency = _format_latency(graph.edge_latency(src_id, dst_id))
        lines.append(f'{src_id} -> {dst_id} [label="R: {latency} us"]')

    lines.append("}")
    return "\n".join(lines) + "\n"


def split_graphs(text: str) -> List[str]:
    """
    Split a file holding several Digraph blocks into one string per graph.

    Args:
        text: File contents

    Returns:
        List of graph descriptions, each including its header and closing brace
    """
    graphs = []
    current: Optional[List[str]] = None

    for line in text.splitlines():
        if HEADER_PATTERN.match(line):
            if current:
                logger.warning("Graph block without closing brace; starting a new one")
                graphs.append("\n".join(current) + "\n")
            current = [line]
            continue

        if current is None:
            continue

        current.append(line)
        if line.strip() == '}':
            graphs.append("\n".join(current) + "\n")
            current = None

    if current:
        logger.warning("Last graph block has no closing brace")
        graphs.append("\n".join(current) + "\n")

    return graphs
