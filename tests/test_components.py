"""
Unit tests for strongly connected component discovery.
"""
import random

import networkx as nx
import pytest

from stackgraph.graphs.components import (
    component_roots,
    finish_order,
    strongly_connected_components,
)
from stackgraph.graphs.export import to_networkx
from stackgraph.graphs.topic_graph import TopicGraph


def vertex_sets(components):
    return {frozenset(component.vertices) for component in components}


def random_user_graph(n_users: int, n_edges: int, seed: int) -> TopicGraph:
    rng = random.Random(seed)
    graph = TopicGraph(f"Random {seed}")
    for user_id in range(1, n_users + 1):
        graph.add_vertex(graph.create_user(user_id))
    for _ in range(n_edges):
        graph.add_edge(rng.randint(1, n_users), rng.randint(1, n_users))
    return graph


def test_cycle_and_isolated_vertex(cycle_graph):
    graph, ids = cycle_graph

    components = strongly_connected_components(graph)

    assert vertex_sets(components) == {
        frozenset({ids["A"], ids["B"], ids["C"]}),
        frozenset({ids["D"]}),
    }


def test_component_subgraphs_keep_internal_edges(cycle_graph):
    graph, ids = cycle_graph

    components = strongly_connected_components(graph)
    cycle = next(c for c in components if len(c) == 3)

    assert set(cycle.edges()) == {
        (ids["A"], ids["B"]),
        (ids["B"], ids["C"]),
        (ids["C"], ids["A"]),
    }
    assert cycle.topic.startswith("SCC with parent 'Cycle' and root ")


def test_wired_community_splits_into_connected_parts(qa_graph):
    graph, ids = qa_graph

    components = strongly_connected_components(graph)

    assert vertex_sets(components) == {
        frozenset({ids["U1"], ids["Q1"], ids["A1"], ids["U2"]}),
        frozenset({ids["U3"], ids["Q2"], ids["C1"], ids["U4"]}),
    }


def test_partition_property(qa_graph, cycle_graph):
    for graph, _ in (qa_graph, cycle_graph):
        components = strongly_connected_components(graph)
        seen = [v for component in components for v in component.vertices]
        assert sorted(seen) == sorted(graph.vertices)


def test_closure_property(qa_graph):
    graph, _ = qa_graph
    for component in strongly_connected_components(graph):
        for from_id, to_id in component.edges():
            assert from_id in component.vertices
            assert to_id in component.vertices


def test_components_share_no_objects(qa_graph):
    graph, _ = qa_graph
    components = strongly_connected_components(graph)

    for component in components:
        for vertex_id, vertex in component.vertices.items():
            assert vertex is not graph.vertices[vertex_id]
            assert vertex.label == graph.vertices[vertex_id].label

    components[0].add_vertex(components[0].create_user(999))
    assert graph.get_user(999) is None


def test_empty_graph():
    assert strongly_connected_components(TopicGraph()) == []
    assert component_roots(TopicGraph()) == {}


def test_finish_order_is_post_order():
    graph = TopicGraph()
    for user_id in (1, 2, 3):
        graph.add_vertex(graph.create_user(user_id))
    graph.add_edge(1, 2)
    graph.add_edge(2, 3)

    # vertex 1 is the only start candidate
    assert finish_order(graph, vertices_to_visit=[1]) == [3, 2, 1]


def test_roots_are_members_of_their_components(cycle_graph):
    graph, _ = cycle_graph
    roots = component_roots(graph)
    for root in roots.values():
        assert roots[root] == root


def test_long_chain_does_not_recurse():
    graph = TopicGraph("Chain")
    n = 5000
    for user_id in range(1, n + 1):
        graph.add_vertex(graph.create_user(user_id))
    for user_id in range(1, n):
        graph.add_edge(user_id, user_id + 1)
    graph.add_edge(n, 1)

    components = strongly_connected_components(graph)

    assert len(components) == 1
    assert len(components[0]) == n


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_matches_networkx(seed):
    graph = random_user_graph(n_users=60, n_edges=90, seed=seed)

    expected = {frozenset(c) for c in nx.strongly_connected_components(to_networkx(graph))}

    assert vertex_sets(strongly_connected_components(graph)) == expected
