"""
Vertex payloads for a Stack Exchange topic graph.

Every vertex shares an identity/adjacency record (``Vertex``) and carries
one of four typed payloads: ``Question``, ``Answer``, ``Comment`` or ``User``.
The field layout follows the public Stack Exchange data dump schema.

Cross references between payloads (author, parent post) are stored as
domain ids, never as object references, so a copied vertex never points
back into the graph it was copied from.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, ClassVar, Dict, List, Optional, Set, Type

from .exceptions import InvalidPayload, UnsupportedVertexKind


class VertexKind(str, Enum):
    """Discriminator for the four payload variants."""

    QUESTION = "question"
    ANSWER = "answer"
    COMMENT = "comment"
    USER = "user"


def _check_int(name: str, value, minimum: Optional[int] = None, optional: bool = False) -> None:
    if value is None and optional:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayload(f"{name} must be an integer, got {value!r}")
    if minimum is not None and value < minimum:
        raise InvalidPayload(f"{name} must be >= {minimum}, got {value}")


@dataclass(kw_only=True)
class Vertex:
    """Identity and outgoing adjacency shared by every payload."""

    kind: ClassVar[Optional[VertexKind]] = None

    vertex_id: int
    label: str = ""
    out_edges: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_int("vertex_id", self.vertex_id, minimum=0)
        if not isinstance(self.label, str):
            raise InvalidPayload(f"label must be a string, got {self.label!r}")


@dataclass(kw_only=True)
class Post(Vertex):
    """Attributes common to questions, answers and comments."""

    post_id: int
    author_user_id: int
    raw_score: int = 0
    body: str = ""
    view_count: int = 0

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_int("post_id", self.post_id)
        _check_int("author_user_id", self.author_user_id)
        _check_int("raw_score", self.raw_score)
        _check_int("view_count", self.view_count, minimum=0)

    @property
    def usefulness(self) -> float:
        """Score per view (0.0 when the post has never been viewed)."""
        if self.view_count == 0:
            return 0.0
        return self.raw_score / self.view_count


@dataclass(kw_only=True)
class Question(Post):
    kind: ClassVar[VertexKind] = VertexKind.QUESTION

    accepted_answer_id: Optional[int] = None
    title: str = ""
    tag_ids: Set[int] = field(default_factory=set)
    answer_count: int = 0
    favorite_count: int = 0
    # domain ids of answers/comments wired to this question
    answer_ids: List[int] = field(default_factory=list)
    comment_ids: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_int("accepted_answer_id", self.accepted_answer_id, optional=True)
        _check_int("answer_count", self.answer_count, minimum=0)
        _check_int("favorite_count", self.favorite_count, minimum=0)
        try:
            tag_ids = set(self.tag_ids)
        except TypeError:
            raise InvalidPayload(f"tag_ids must be iterable, got {self.tag_ids!r}") from None
        for tag_id in tag_ids:
            _check_int("tag id", tag_id)
        self.tag_ids = tag_ids

    def _per_view(self, count: int) -> float:
        if self.view_count == 0:
            return 0.0
        return count / self.view_count

    @property
    def answers_per_view(self) -> float:
        return self._per_view(len(self.answer_ids))

    @property
    def comments_per_view(self) -> float:
        return self._per_view(len(self.comment_ids))

    @property
    def favorites_per_view(self) -> float:
        return self._per_view(self.favorite_count)


@dataclass(kw_only=True)
class Answer(Post):
    kind: ClassVar[VertexKind] = VertexKind.ANSWER

    parent_question_post_id: int
    comment_ids: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_int("parent_question_post_id", self.parent_question_post_id)

    @property
    def comments_per_view(self) -> float:
        if self.view_count == 0:
            return 0.0
        return len(self.comment_ids) / self.view_count


@dataclass(kw_only=True)
class Comment(Post):
    kind: ClassVar[VertexKind] = VertexKind.COMMENT

    # a question or an answer
    parent_post_id: int

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_int("parent_post_id", self.parent_post_id)


@dataclass(kw_only=True)
class User(Vertex):
    kind: ClassVar[VertexKind] = VertexKind.USER

    user_id: int
    reputation: int = 0
    age: Optional[int] = None
    upvotes: int = 0
    downvotes: int = 0
    account_id: int = 0
    authored_question_ids: List[int] = field(default_factory=list)
    authored_answer_ids: List[int] = field(default_factory=list)
    authored_comment_ids: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_int("user_id", self.user_id)
        _check_int("reputation", self.reputation)
        _check_int("age", self.age, minimum=0, optional=True)
        _check_int("upvotes", self.upvotes, minimum=0)
        _check_int("downvotes", self.downvotes, minimum=0)
        _check_int("account_id", self.account_id)


def _copy_question(question: Question) -> Question:
    return replace(
        question,
        out_edges=[],
        tag_ids=set(question.tag_ids),
        answer_ids=[],
        comment_ids=[],
    )


def _copy_answer(answer: Answer) -> Answer:
    return replace(answer, out_edges=[], comment_ids=[])


def _copy_comment(comment: Comment) -> Comment:
    return replace(comment, out_edges=[])


def _copy_user(user: User) -> User:
    return replace(
        user,
        out_edges=[],
        authored_question_ids=[],
        authored_answer_ids=[],
        authored_comment_ids=[],
    )


_COPIERS: Dict[Type[Vertex], Callable[[Vertex], Vertex]] = {
    Question: _copy_question,
    Answer: _copy_answer,
    Comment: _copy_comment,
    User: _copy_user,
}


def copy_vertex(vertex: Vertex) -> Vertex:
    """
    Make an independent copy of a payload.

    The copy keeps the vertex id, label and every constructor attribute,
    but gets an empty adjacency list and empty back-reference lists.
    Those are rebuilt when edges are wired inside the graph that receives
    the copy.

    Args:
        vertex: The payload to copy

    Returns:
        Vertex: A new payload of the same variant

    Raises:
        UnsupportedVertexKind: If the payload is not one of the four variants
    """
    copier = _COPIERS.get(type(vertex))
    if copier is None:
        raise UnsupportedVertexKind(vertex)
    return copier(vertex)
