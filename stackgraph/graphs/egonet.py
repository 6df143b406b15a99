"""
Egonet extraction for a topic graph.

The egonet of a user c contains:

1. c itself;
2. every vertex reachable from c through posts only, up to and including
   the first user met on each path (the "second-hop" users);
3. every post reachable, through posts only, from at least two distinct
   second-hop users (the confluence rule). This keeps posts that bridge
   the user's contacts and leaves out branches only one contact leads to.

All edges between surviving vertices are copied into the egonet. The
egonet of a post is the egonet of its author.
"""

import logging
from typing import Dict, List, Optional, Set

from .exceptions import UnknownVertex
from .topic_graph import TopicGraph
from .vertices import User

logger = logging.getLogger(__name__)


def resolve_center(graph: TopicGraph, center: int) -> int:
    """
    Return the user vertex an egonet of ``center`` is built around.

    Raises:
        UnknownVertex: If ``center`` is not in the graph, or is a post
            whose author is not in the graph
    """
    author_id = graph.author_vertex_id(center)
    if author_id is None:
        vertex = graph.get_vertex(center)
        logger.warning(f"Author {vertex.author_user_id} of vertex {center} is not in {graph.topic}")
        raise UnknownVertex(center)
    return author_id


def direct_neighbourhood(graph: TopicGraph, center: int) -> Dict[int, None]:
    """
    Phase A: everything reachable from ``center`` up to the next users.

    Posts are expanded transitively; users other than the center are
    included but not expanded.

    Returns:
        Dict[int, None]: Reached vertex ids in discovery order (center first)
    """
    found: Dict[int, None] = {center: None}
    stack = [center]

    while stack:
        vertex_id = stack.pop()
        for neighbour_id in graph.vertices[vertex_id].out_edges:
            if neighbour_id in found:
                continue
            found[neighbour_id] = None
            if not isinstance(graph.vertices[neighbour_id], User):
                stack.append(neighbour_id)

    return found


def _posts_reachable_from(graph: TopicGraph, user_id: int, blocked: Set[int]) -> List[int]:
    """Posts reachable from a user through posts outside ``blocked``."""
    visited: Set[int] = set()
    reached: List[int] = []
    stack = [user_id]

    while stack:
        vertex_id = stack.pop()
        for neighbour_id in graph.vertices[vertex_id].out_edges:
            if neighbour_id in visited or neighbour_id in blocked:
                continue
            if isinstance(graph.vertices[neighbour_id], User):
                continue
            visited.add(neighbour_id)
            reached.append(neighbour_id)
            stack.append(neighbour_id)

    return reached


def confluent_posts(
    graph: TopicGraph,
    second_hop_users: List[int],
    blocked: Set[int],
) -> List[int]:
    """
    Phase B: posts reached by at least two distinct second-hop users.

    Each user walks through posts outside ``blocked`` (the phase A set).
    The first user to reach a post is recorded as its first finder; when
    a different user reaches it, that user becomes the second finder and
    the post is promoted.

    Returns:
        List[int]: Promoted vertex ids in promotion order
    """
    # vertex id -> [first finder, second finder]
    finders: Dict[int, List[Optional[int]]] = {}
    promoted: List[int] = []

    for user_id in second_hop_users:
        for vertex_id in _posts_reachable_from(graph, user_id, blocked):
            finder = finders.get(vertex_id)
            if finder is None:
                finders[vertex_id] = [user_id, None]
            elif finder[0] != user_id and finder[1] is None:
                finder[1] = user_id
                promoted.append(vertex_id)

    return promoted


def build_egonet(graph: TopicGraph, center: int) -> TopicGraph:
    """
    Construct the egonet around a vertex.

    If ``center`` is a post, the egonet of its author is built instead.
    The returned graph shares no objects with ``graph``; each vertex keeps
    its id, label and attributes.

    Args:
        graph: The graph to extract from
        center: Vertex id of a user or post

    Returns:
        TopicGraph: The egonet, always containing the center user

    Raises:
        UnknownVertex: If the center (or a post center's author) is not in the graph
    """
    center_id = resolve_center(graph, center)

    neighbourhood = direct_neighbourhood(graph, center_id)
    second_hop_users = [
        vertex_id
        for vertex_id in neighbourhood
        if vertex_id != center_id and isinstance(graph.vertices[vertex_id], User)
    ]
    promoted = confluent_posts(graph, second_hop_users, blocked=set(neighbourhood))

    egonet = graph.induced_subgraph(
        list(neighbourhood) + promoted,
        topic=f"Egonet for vertex {center_id} within {graph.topic}",
    )
    logger.debug(
        f"Egonet of {center_id}: {len(neighbourhood)} direct, "
        f"{len(second_hop_users)} second-hop users, {len(promoted)} confluent"
    )
    return egonet
