"""
Exception hierarchy for topic graph construction and analysis.

All errors inherit from TopicGraphError so callers can catch them
uniformly. Each one also subclasses the closest builtin so existing
``except KeyError`` / ``except ValueError`` handlers keep working.
"""


class TopicGraphError(Exception):
    """Base exception for all topic graph errors."""


class DuplicateVertexId(TopicGraphError, ValueError):
    """A vertex with the same synthetic id is already in the graph."""

    def __init__(self, vertex_id: int):
        self.vertex_id = vertex_id
        super().__init__(f"Graph already contains vertex with id {vertex_id}")


class UnknownVertex(TopicGraphError, KeyError):
    """An operation referenced a vertex id that is not in the graph."""

    def __init__(self, vertex_id: int):
        self.vertex_id = vertex_id
        super().__init__(f"No vertex with id {vertex_id} in graph")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class MissingParent(TopicGraphError, ValueError):
    """A child post was constructed before its parent post exists."""

    def __init__(self, parent_post_id: int, child_post_id: int):
        self.parent_post_id = parent_post_id
        self.child_post_id = child_post_id
        super().__init__(
            f"Parent post {parent_post_id} must be added before child post {child_post_id}"
        )


class InvalidPayload(TopicGraphError, ValueError):
    """A payload carries malformed attributes for its vertex type."""


class UnsupportedVertexKind(TopicGraphError, TypeError):
    """A payload is not a question, answer, comment, or user."""

    def __init__(self, obj: object):
        super().__init__(
            "Vertices in a topic graph must be a question, answer, comment, or user, "
            f"got {type(obj).__name__}"
        )
