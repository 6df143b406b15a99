"""
Strongly connected components of a topic graph.

Uses the two-pass (Kosaraju) algorithm:

1. DFS over the forward edges, recording vertices in post-order
   (a vertex finishes once everything reachable from it has finished).
2. DFS over the transpose graph, taking roots latest-finishing first.
   Each DFS tree of the second pass is one strongly connected component.

Both passes use an explicit stack of (vertex id, neighbour iterator)
frames, so the depth of a walk is bounded by memory, not by Python's
recursion limit.

Which vertex becomes the root of a component depends on the insertion
order of the graph's vertices. Component membership does not.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .topic_graph import TopicGraph

logger = logging.getLogger(__name__)


def _walk(graph: TopicGraph, root: int, visited: Set[int]) -> Iterator[int]:
    """
    Depth-first walk from ``root``, yielding vertices as they finish.

    Vertices already in ``visited`` are not entered; every vertex entered
    is added to it.
    """
    visited.add(root)
    frames = [(root, iter(graph.vertices[root].out_edges))]

    while frames:
        vertex_id, neighbours = frames[-1]
        for neighbour_id in neighbours:
            if neighbour_id not in visited:
                visited.add(neighbour_id)
                frames.append((neighbour_id, iter(graph.vertices[neighbour_id].out_edges)))
                break
        else:
            frames.pop()
            yield vertex_id


def finish_order(graph: TopicGraph, vertices_to_visit: Optional[Iterable[int]] = None) -> List[int]:
    """
    First pass: DFS finishing order over every vertex of the graph.

    Args:
        graph: The graph to walk
        vertices_to_visit: Stack of start candidates, popped from the end.
            Defaults to every vertex id in insertion order.

    Returns:
        List[int]: Vertex ids, earliest-finishing first
    """
    stack = list(graph.vertices) if vertices_to_visit is None else list(vertices_to_visit)
    visited: Set[int] = set()
    finished: List[int] = []

    while stack:
        vertex_id = stack.pop()
        if vertex_id not in visited:
            finished.extend(_walk(graph, vertex_id, visited))

    return finished


def component_roots(graph: TopicGraph) -> Dict[int, int]:
    """
    Map every vertex to the root of its strongly connected component.

    Args:
        graph: The graph to analyze

    Returns:
        Dict[int, int]: vertex id -> component root id. Vertices of one
        component appear contiguously, in discovery order.
    """
    finished = finish_order(graph)
    transposed = graph.transpose()

    visited: Set[int] = set()
    component_map: Dict[int, int] = {}

    while finished:
        root = finished.pop()
        if root in visited:
            continue
        for vertex_id in _walk(transposed, root, visited):
            component_map[vertex_id] = root

    return component_map


def strongly_connected_components(graph: TopicGraph) -> List[TopicGraph]:
    """
    Find all strongly connected components of a topic graph.

    Each component is returned as a new TopicGraph holding copies of its
    vertices and only the edges between them. No vertex, payload or
    adjacency list is shared with the input graph or between components.

    Args:
        graph: The graph to analyze

    Returns:
        List[TopicGraph]: One subgraph per component, in discovery order
    """
    logger.info(f"Finding strongly connected components of {graph.topic}")

    members: Dict[int, List[int]] = {}
    for vertex_id, root in component_roots(graph).items():
        members.setdefault(root, []).append(vertex_id)

    components = [
        graph.induced_subgraph(
            vertex_ids,
            topic=f"SCC with parent '{graph.topic}' and root {root}",
        )
        for root, vertex_ids in members.items()
    ]

    logger.info(f"Found {len(components):,} strongly connected components in {graph.topic}")
    return components
