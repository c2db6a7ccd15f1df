# spectroscope/graph/structured_graph.py - Request-flow graph model
"""
Structured request-flow graphs.

A request-flow graph describes one request's call structure: nodes are
operations, directed parent -> child edges carry the observed latency in
microseconds. The structure is a DAG, so a node may have several parents.

Graphs have two forms:

- GraphBuilder: an unfinalized graph. Only mutating operations exist on it.
- RequestGraph: a finalized graph produced by GraphBuilder.finalize(). It is
  immutable and only exposes read accessors, so it can be shared between
  threads without locking.

Finalizing sorts every node's children and parents by display name (ties keep
their insertion order). Two graphs with the same structure therefore list
their nodes in the same order no matter how they were built or traversed.
"""

from dataclasses import dataclass
import math
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple
import logging

from spectroscope.exceptions import (
    DuplicateEdgeError,
    EdgeNotFoundError,
    GraphInvariantError,
    GraphStateError,
    NodeNotFoundError,
)


logger = logging.getLogger(__name__)

EdgeKey = Tuple[str, str]


@dataclass(frozen=True)
class Node:
    """
    A node of a finalized request-flow graph.
    """
    id: str
    name: str
    children: Tuple[str, ...] = ()
    parents: Tuple[str, ...] = ()


class RequestGraph:
    """
    A finalized, read-only request-flow graph.

    Instances are created by GraphBuilder.finalize() or by
    dot_format.build_from_text(); there is no public mutating API.
    """

    def __init__(self, graph_id: str, root_id: Optional[str],
                 nodes: Mapping[str, Node], latencies: Mapping[EdgeKey, float]):
        self._graph_id = graph_id
        self._root_id = root_id
        self._nodes = MappingProxyType(dict(nodes))
        self._latencies = MappingProxyType(dict(latencies))

    @property
    def graph_id(self) -> str:
        """Identifier written in the graph's Digraph header"""
        return self._graph_id

    @property
    def has_root(self) -> bool:
        return self._root_id is not None

    def root_id(self) -> str:
        """
        Get the root node's id.

        Raises:
            GraphStateError: If the graph is empty
        """
        if self._root_id is None:
            raise GraphStateError(f"Graph {self._graph_id} has no root")
        return self._root_id

    def node(self, node_id: str) -> Node:
        """
        Get a node by id.

        Raises:
            NodeNotFoundError: If the id is not in the graph
        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def name(self, node_id: str) -> str:
        """Display name of a node"""
        return self.node(node_id).name

    def children(self, node_id: str) -> Tuple[str, ...]:
        """Child ids of a node in canonical order"""
        return self.node(node_id).children

    def parents(self, node_id: str) -> Tuple[str, ...]:
        """Parent ids of a node in canonical order"""
        return self.node(node_id).parents

    def edge_latency(self, parent_id: str, child_id: str) -> float:
        """
        Get the latency of the edge parent_id -> child_id.

        Args:
            parent_id: Id of the parent node
            child_id: Id of the child node

        Returns:
            Latency in microseconds

        Raises:
            NodeNotFoundError: If either id is not in the graph
            EdgeNotFoundError: If both nodes exist but are not linked
        """
        self.node(parent_id)
        self.node(child_id)

        try:
            return self._latencies[(parent_id, child_id)]
        except KeyError:
            raise EdgeNotFoundError(parent_id, child_id) from None

    def node_ids(self) -> List[str]:
        """All node ids in insertion order"""
        return list(self._nodes)

    def edges(self) -> Iterator[Tuple[str, str, float]]:
        """Iterate (parent_id, child_id, latency) in insertion order"""
        for (parent_id, child_id), latency in self._latencies.items():
            yield parent_id, child_id, latency

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def __eq__(self, other) -> bool:
        """Structural equality; the graph id and tie order are ignored."""
        if not isinstance(other, RequestGraph):
            return NotImplemented

        if self._root_id != other._root_id:
            return False
        if set(self._nodes) != set(other._nodes):
            return False
        if dict(self._latencies) != dict(other._latencies):
            return False

        for node_id, node in self._nodes.items():
            theirs = other._nodes[node_id]
            if node.name != theirs.name:
                return False
            if sorted(node.children) != sorted(theirs.children):
                return False
            if sorted(node.parents) != sorted(theirs.parents):
                return False

        return True

    __hash__ = None

    def __repr__(self) -> str:
        return (f"RequestGraph(id={self._graph_id!r}, root={self._root_id!r}, "
                f"nodes={len(self._nodes)}, edges={len(self._latencies)})")


class GraphBuilder:
    """
    Incrementally builds a request-flow graph.

    Create the root with add_root(), attach children with add_child() or
    add_existing_child(), then call finalize() to obtain the RequestGraph.
    A builder belongs to a single caller; it is not safe to mutate from
    several threads.
    """

    def __init__(self, graph_id: str = "0"):
        """
        Initialize an empty builder.

        Args:
            graph_id: Prefix of generated node ids and id of the final graph
        """
        self.graph_id = str(graph_id)

        self._names: Dict[str, str] = {}
        self._children: Dict[str, List[str]] = {}
        self._parents: Dict[str, List[str]] = {}
        self._latencies: Dict[EdgeKey, float] = {}

        self._root_id: Optional[str] = None
        self._next_id = 1
        self._graph: Optional[RequestGraph] = None

    @property
    def finalized(self) -> bool:
        """Whether finalize() has been called"""
        return self._graph is not None

    def _check_mutable(self):
        if self._graph is not None:
            raise GraphStateError(f"Graph {self.graph_id} is finalized and cannot be modified")

    def _check_node(self, node_id: str):
        if node_id not in self._names:
            raise NodeNotFoundError(node_id)

    def _create_node(self, name: str) -> str:
        node_id = f"{self.graph_id}.{self._next_id}"
        self._next_id += 1

        # Skip ids already taken by add_node()
        while node_id in self._names:
            node_id = f"{self.graph_id}.{self._next_id}"
            self._next_id += 1

        self._install(node_id, name)
        return node_id

    def _install(self, node_id: str, name: str):
        self._names[node_id] = name
        self._children[node_id] = []
        self._parents[node_id] = []

    def add_node(self, node_id: str, name: str) -> str:
        """
        Add an unlinked node with an explicit id.

        Args:
            node_id: Id of the new node
            name: Display name of the new node

        Returns:
            The node id
        """
        self._check_mutable()

        node_id = str(node_id)
        if node_id in self._names:
            raise GraphInvariantError(f"Node {node_id} already exists in graph {self.graph_id}")

        self._install(node_id, name)
        return node_id

    def set_root(self, node_id: str):
        """
        Designate an existing node as the root.

        Raises:
            GraphStateError: If a root is already set or the graph is finalized
        """
        self._check_mutable()
        self._check_node(node_id)

        if self._root_id is not None:
            raise GraphStateError(f"Graph {self.graph_id} already has root {self._root_id}")

        self._root_id = node_id

    def add_root(self, name: str) -> str:
        """
        Create and install the root node.

        Args:
            name: Display name of the root

        Returns:
            Id of the root node
        """
        self._check_mutable()

        if self._root_id is not None:
            raise GraphStateError(f"Graph {self.graph_id} already has root {self._root_id}")

        self._root_id = self._create_node(name)
        return self._root_id

    def add_child(self, parent_id: str, child_name: str, latency: float) -> str:
        """
        Create a new node and link it below parent_id.

        Args:
            parent_id: Id of an existing node
            child_name: Display name of the new child
            latency: Edge latency in microseconds

        Returns:
            Id of the new child
        """
        self._check_mutable()
        self._check_node(parent_id)

        latency = self._check_latency(parent_id, latency)
        child_id = self._create_node(child_name)
        self._link(parent_id, child_id, latency)

        return child_id

    def add_existing_child(self, parent_id: str, child_id: str, latency: float):
        """
        Link two existing nodes, e.g. a node shared by several parents.

        Args:
            parent_id: Id of the parent node
            child_id: Id of the child node
            latency: Edge latency in microseconds

        Raises:
            DuplicateEdgeError: If parent_id -> child_id already has a latency
        """
        self._check_mutable()
        self._check_node(parent_id)
        self._check_node(child_id)

        self._link(parent_id, child_id, latency)

    @staticmethod
    def _check_latency(parent_id: str, latency: float) -> float:
        latency = float(latency)
        if not math.isfinite(latency) or latency < 0:
            raise GraphInvariantError(f"Latency {latency} below {parent_id} "
                                      f"is not a finite non-negative number")
        return latency

    def _link(self, parent_id: str, child_id: str, latency: float):
        key = (parent_id, child_id)
        if key in self._latencies:
            raise DuplicateEdgeError(parent_id, child_id)

        self._latencies[key] = self._check_latency(parent_id, latency)
        self._children[parent_id].append(child_id)
        self._parents[child_id].append(parent_id)

    def finalize(self) -> RequestGraph:
        """
        Canonicalize the node ordering and freeze the graph.

        Calling finalize() again returns the same RequestGraph.

        Returns:
            The finalized graph
        """
        if self._graph is not None:
            return self._graph

        def by_name(node_id):
            return self._names[node_id]

        # sorted() is stable, so equal names keep their insertion order
        nodes = {
            node_id: Node(
                id=node_id,
                name=name,
                children=tuple(sorted(self._children[node_id], key=by_name)),
                parents=tuple(sorted(self._parents[node_id], key=by_name)),
            )
            for node_id, name in self._names.items()
        }

        self._graph = RequestGraph(self.graph_id, self._root_id, nodes, self._latencies)
        logger.debug(f"Finalized {self._graph!r}")

        return self._graph


def new_builder(graph_id: str = "0") -> GraphBuilder:
    """
    Start an empty, unfinalized graph.

    Args:
        graph_id: Prefix of generated node ids

    Returns:
        A new GraphBuilder
    """
    return GraphBuilder(graph_id)
