"""
Topic graph module for Stack Exchange communities.

This module models a community as one directed graph of questions,
answers, comments and users, and analyzes it:
- Strongly connected components (two-pass Kosaraju)
- User-centred egonets
- Louvain communities and linked-list export for external tools
- Per-question features for usefulness regression
"""

from .components import strongly_connected_components
from .egonet import build_egonet
from .exceptions import (
    DuplicateVertexId,
    InvalidPayload,
    MissingParent,
    TopicGraphError,
    UnknownVertex,
    UnsupportedVertexKind,
)
from .export import (
    communities_from_assignment,
    detect_communities,
    export_adjacency,
    read_community_assignment,
    to_networkx,
    write_linked_list,
)
from .features import question_features
from .loader import load_topic_graph
from .topic_graph import DEFAULT_TOPIC, TopicGraph
from .vertices import Answer, Comment, Question, User, Vertex, VertexKind, copy_vertex

__all__ = [
    "Answer",
    "Comment",
    "DEFAULT_TOPIC",
    "DuplicateVertexId",
    "InvalidPayload",
    "MissingParent",
    "Question",
    "TopicGraph",
    "TopicGraphError",
    "UnknownVertex",
    "UnsupportedVertexKind",
    "User",
    "Vertex",
    "VertexKind",
    "build_egonet",
    "communities_from_assignment",
    "copy_vertex",
    "detect_communities",
    "export_adjacency",
    "load_topic_graph",
    "question_features",
    "read_community_assignment",
    "strongly_connected_components",
    "to_networkx",
    "write_linked_list",
]
