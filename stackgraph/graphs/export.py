"""
Export and community detection for topic graphs.

This module provides functions to:
1. Snapshot a graph's adjacency or convert it to NetworkX
2. Write the plain-text linked-list format read by external community tools
3. Detect communities with the Louvain method, or map an external tool's
   community assignment back onto the graph
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

import networkx as nx

from .exceptions import InvalidPayload
from .topic_graph import TopicGraph

logger = logging.getLogger(__name__)


def export_adjacency(graph: TopicGraph) -> Dict[int, Set[int]]:
    """
    Snapshot the graph as vertex id -> set of out-neighbour ids.

    Every vertex appears as a key, including those without out edges.
    Later mutation of the graph does not affect the returned mapping.
    """
    return {vertex_id: set(vertex.out_edges) for vertex_id, vertex in graph.vertices.items()}


def dense_index(graph: TopicGraph) -> Dict[int, int]:
    """Map original vertex ids to 0..n-1 in ascending id order."""
    return {vertex_id: i for i, vertex_id in enumerate(sorted(graph.vertices))}


def linked_list_lines(graph: TopicGraph) -> Iterator[str]:
    """
    Yield the graph in linked-list text form, one ``"<from> <to>"`` per line.

    Both endpoints use dense indices (see ``dense_index``). A vertex without
    out edges is written as a self loop so that it still appears in the
    output. Vertices are emitted in ascending id order and each vertex's
    edges in adjacency order.
    """
    index = dense_index(graph)
    for vertex_id in sorted(graph.vertices):
        out_edges = graph.vertices[vertex_id].out_edges
        if not out_edges:
            yield f"{index[vertex_id]} {index[vertex_id]}"
            continue
        for to_id in out_edges:
            yield f"{index[vertex_id]} {index[to_id]}"


def write_linked_list(graph: TopicGraph, path: Union[str, Path]) -> Path:
    """
    Write the linked-list text form of a graph to disk.

    Args:
        graph: The graph to export
        path: Output file; parent directories are created

    Returns:
        Path: Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        for line in linked_list_lines(graph):
            f.write(line + "\n")

    logger.info(f"Wrote linked list for {graph.topic} to {path}")
    return path


def to_networkx(graph: TopicGraph) -> nx.DiGraph:
    """
    Convert a topic graph to a NetworkX directed graph.

    Nodes are vertex ids with ``kind`` and ``label`` attributes.
    """
    G = nx.DiGraph(topic=graph.topic)
    for vertex_id, vertex in graph.vertices.items():
        G.add_node(vertex_id, kind=vertex.kind.value, label=vertex.label)
    G.add_edges_from(graph.edges())
    return G


def _materialize(graph: TopicGraph, groups: Dict[int, Iterable[int]]) -> List[TopicGraph]:
    return [
        graph.induced_subgraph(sorted(vertex_ids), topic=f"Community {community} of {graph.topic}")
        for community, vertex_ids in groups.items()
    ]


def detect_communities(
    graph: TopicGraph,
    resolution: float = 1.0,
    seed: Optional[int] = None,
) -> List[TopicGraph]:
    """
    Partition a graph into communities with the Louvain method.

    Every relation is stored in both directions, so detection runs on the
    undirected view of the graph.

    Args:
        graph: The graph to partition
        resolution: Louvain resolution; higher values favour smaller communities
        seed: Random seed for reproducible partitions

    Returns:
        List[TopicGraph]: One independent subgraph per community, ordered
        by smallest member id
    """
    logger.info(f"Detecting communities in {graph.topic} (resolution={resolution})")
    if not graph.vertices:
        return []

    G = to_networkx(graph).to_undirected()
    groups = nx.community.louvain_communities(G, resolution=resolution, seed=seed)
    groups = sorted(groups, key=min)

    communities = _materialize(graph, dict(enumerate(groups)))
    logger.info(f"Found {len(communities):,} communities in {graph.topic}")
    return communities


def read_community_assignment(path: Union[str, Path], level: int = 0) -> Dict[int, int]:
    """
    Read a ``"<node> <community>"`` assignment file.

    A file holding several hierarchy levels lists them one after another;
    each level restarts at node 0.

    Args:
        path: Assignment file
        level: Hierarchy level to read

    Returns:
        Dict[int, int]: dense node index -> community id

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidPayload: If a line is not two integers
        ValueError: If the requested level is not in the file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Community assignment {path} does not exist")

    levels: List[Dict[int, int]] = []
    with open(path) as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            parts = line.split()
            try:
                node, community = (int(p) for p in parts)
            except ValueError:
                raise InvalidPayload(
                    f"{path}:{line_number}: expected '<node> <community>', got {line.strip()!r}"
                ) from None
            if node == 0 or not levels:
                levels.append({})
            levels[-1][node] = community

    if not 0 <= level < len(levels):
        raise ValueError(f"{path} has {len(levels)} level(s), level {level} requested")
    return levels[level]


def communities_from_assignment(graph: TopicGraph, assignment: Dict[int, int]) -> List[TopicGraph]:
    """
    Materialize communities from a dense-index assignment.

    Dense indices refer to the graph's vertex ids in ascending order, as
    written by ``write_linked_list``.

    Returns:
        List[TopicGraph]: One subgraph per community id, in ascending id order

    Raises:
        InvalidPayload: If a dense index is outside the graph
    """
    sorted_ids = sorted(graph.vertices)
    members: Dict[int, List[int]] = {}
    for node, community in assignment.items():
        if not 0 <= node < len(sorted_ids):
            raise InvalidPayload(f"Dense index {node} out of range for {len(sorted_ids)} vertices")
        members.setdefault(community, []).append(sorted_ids[node])

    return _materialize(graph, {c: members[c] for c in sorted(members)})
