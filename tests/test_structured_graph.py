# tests/test_structured_graph.py - Tests for the request-flow graph model
"""
Unit tests for GraphBuilder and RequestGraph.
"""

import pytest
from spectroscope.exceptions import (
    DuplicateEdgeError,
    EdgeNotFoundError,
    GraphInvariantError,
    GraphStateError,
    NodeNotFoundError,
)
from spectroscope.graph.structured_graph import GraphBuilder, RequestGraph, new_builder


def build_dag():
    """root -> (read, lookup), both -> cache -> disk"""
    builder = new_builder("7")
    root = builder.add_root("NFS3_READ_CALL")
    read = builder.add_child(root, "read", 100)
    lookup = builder.add_child(root, "lookup", 50)
    cache = builder.add_child(read, "cache", 10)
    builder.add_existing_child(lookup, cache, 20)
    disk = builder.add_child(cache, "disk", 300)
    return builder, {'root': root, 'read': read, 'lookup': lookup, 'cache': cache, 'disk': disk}


class TestGraphBuilder:
    """Test cases for GraphBuilder"""

    def test_generated_ids(self):
        """Test node ids are '<graph_id>.<n>' starting at 1 for the root"""
        builder, ids = build_dag()

        assert ids['root'] == "7.1"
        assert ids['read'] == "7.2"
        assert ids['disk'] == "7.5"

    def test_second_root_fails(self):
        """Test a graph only gets one root"""
        builder = GraphBuilder("1")
        builder.add_root("a")

        with pytest.raises(GraphStateError):
            builder.add_root("b")

    def test_mutation_after_finalize_fails(self):
        """Test all mutating operations are rejected once finalized"""
        builder, ids = build_dag()
        builder.finalize()

        assert builder.finalized
        with pytest.raises(GraphStateError):
            builder.add_child(ids['root'], "late", 1)
        with pytest.raises(GraphStateError):
            builder.add_existing_child(ids['read'], ids['disk'], 1)
        with pytest.raises(GraphStateError):
            builder.add_root("again")

    def test_duplicate_edge_fails(self):
        """Test a second latency for the same (parent, child) pair is rejected"""
        builder, ids = build_dag()

        with pytest.raises(DuplicateEdgeError) as exc_info:
            builder.add_existing_child(ids['lookup'], ids['cache'], 99)

        assert exc_info.value.parent_id == ids['lookup']
        assert exc_info.value.child_id == ids['cache']

    def test_unknown_parent_fails(self):
        """Test linking below an unknown node"""
        builder = GraphBuilder("1")
        builder.add_root("a")

        with pytest.raises(NodeNotFoundError):
            builder.add_child("1.99", "b", 5)

    def test_negative_latency_fails(self):
        """Test latencies must be non-negative"""
        builder = GraphBuilder("1")
        root = builder.add_root("a")

        with pytest.raises(GraphInvariantError):
            builder.add_child(root, "b", -1)

    @pytest.mark.parametrize("latency", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_latency_fails(self, latency):
        """Test NaN and infinite latencies are rejected"""
        builder = GraphBuilder("1")
        root = builder.add_root("a")
        other = builder.add_child(root, "b", 1)

        with pytest.raises(GraphInvariantError):
            builder.add_child(root, "c", latency)
        with pytest.raises(GraphInvariantError):
            builder.add_existing_child(other, root, latency)

        graph = builder.finalize()
        assert len(graph) == 2
        assert graph.parents(root) == ()

    def test_builder_has_no_read_accessors(self):
        """Test reads are only available on the finalized graph"""
        builder = GraphBuilder("1")

        for accessor in ('children', 'parents', 'name', 'edge_latency'):
            assert not hasattr(builder, accessor)

    def test_finalize_is_idempotent(self):
        """Test finalizing twice returns the same canonical graph"""
        builder, ids = build_dag()

        first = builder.finalize()
        second = builder.finalize()

        assert first is second
        assert first.children(ids['root']) == second.children(ids['root'])


class TestRequestGraph:
    """Test cases for the finalized RequestGraph"""

    def test_children_sorted_by_name(self):
        """Test children are ordered by display name, not insertion"""
        builder, ids = build_dag()
        graph = builder.finalize()

        # 'lookup' < 'read'
        assert graph.children(ids['root']) == (ids['lookup'], ids['read'])

    def test_parents_sorted_by_name(self):
        """Test a shared node lists all its parents, ordered by name"""
        builder, ids = build_dag()
        graph = builder.finalize()

        assert graph.parents(ids['cache']) == (ids['lookup'], ids['read'])
        assert graph.parents(ids['root']) == ()

    def test_name_ties_keep_insertion_order(self):
        """Test children with equal names keep the order they were added in"""
        builder = GraphBuilder("1")
        root = builder.add_root("root")
        first = builder.add_child(root, "rpc", 1)
        second = builder.add_child(root, "rpc", 2)
        builder.add_child(root, "a", 3)
        graph = builder.finalize()

        assert graph.children(root)[1:] == (first, second)

    def test_accessors(self):
        """Test root, name and edge latency accessors"""
        builder, ids = build_dag()
        graph = builder.finalize()

        assert graph.root_id() == ids['root']
        assert graph.name(ids['disk']) == "disk"
        assert graph.edge_latency(ids['lookup'], ids['cache']) == 20.0
        assert len(graph) == 5
        assert ids['disk'] in graph

    def test_unknown_node(self):
        """Test accessors fail on unknown ids"""
        builder, ids = build_dag()
        graph = builder.finalize()

        with pytest.raises(NodeNotFoundError):
            graph.name("nope")
        with pytest.raises(NodeNotFoundError):
            graph.children("nope")
        with pytest.raises(KeyError):
            graph.parents("nope")
        with pytest.raises(NodeNotFoundError):
            graph.edge_latency(ids['root'], "nope")

    def test_unknown_edge(self):
        """Test an edge latency between unlinked nodes"""
        builder, ids = build_dag()
        graph = builder.finalize()

        with pytest.raises(EdgeNotFoundError):
            graph.edge_latency(ids['root'], ids['disk'])

    def test_empty_graph_has_no_root(self):
        """Test an empty graph"""
        graph = GraphBuilder("1").finalize()

        assert not graph.has_root
        with pytest.raises(GraphStateError):
            graph.root_id()

    def test_structural_equality(self):
        """Test two identically built graphs compare equal"""
        first = build_dag()[0].finalize()
        second = build_dag()[0].finalize()

        assert first == second
        assert isinstance(first, RequestGraph)

    def test_inequality_on_latency(self):
        """Test graphs differing only in one latency are not equal"""
        first = build_dag()[0].finalize()

        builder = new_builder("7")
        root = builder.add_root("NFS3_READ_CALL")
        read = builder.add_child(root, "read", 100)
        lookup = builder.add_child(root, "lookup", 50)
        cache = builder.add_child(read, "cache", 10)
        builder.add_existing_child(lookup, cache, 21)
        builder.add_child(cache, "disk", 300)

        assert first != builder.finalize()
