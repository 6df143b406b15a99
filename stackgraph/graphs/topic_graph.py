"""
Topic graph container for a Stack Exchange community.

Vertices are questions, answers, comments and users. Edges connect users
to the posts they authored and posts to their parent posts; every such
relation is stored as two opposite directed edges.

Besides the synthetic-id vertex map, the graph keeps one index per vertex
type from domain id (post id / comment id / user id) to vertex id, because
child posts refer to their parents and authors by domain id.
"""

import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .exceptions import (
    DuplicateVertexId,
    InvalidPayload,
    MissingParent,
    UnknownVertex,
    UnsupportedVertexKind,
)
from .vertices import Answer, Comment, Post, Question, User, Vertex, copy_vertex

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "Default Topic Name"


class TopicGraph:
    """
    A directed graph whose vertices are typed Stack Exchange records.

    Vertex ids come from a counter local to this instance and are never
    reused. Graphs derived from this one (transpose, SCCs, egonets,
    communities) copy the numeric ids of the vertices they contain and the
    current counter value, so ids stay comparable across them.
    """

    def __init__(self, topic: str = DEFAULT_TOPIC):
        self.topic = topic
        self.vertices: Dict[int, Vertex] = {}

        # domain id -> vertex id
        self.questions: Dict[int, int] = {}
        self.answers: Dict[int, int] = {}
        self.comments: Dict[int, int] = {}
        self.users: Dict[int, int] = {}

        self._next_vertex_id = 1
        self._next_placeholder_user_id = -1

    def __repr__(self) -> str:
        return (
            f"TopicGraph(topic={self.topic!r}, "
            f"|V|={len(self.vertices)}, |E|={self.number_of_edges()})"
        )

    def __len__(self) -> int:
        return len(self.vertices)

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self.vertices

    @property
    def next_vertex_id(self) -> int:
        """The id the next created payload will receive."""
        return self._next_vertex_id

    def _reserve_vertex_id(self) -> int:
        vertex_id = self._next_vertex_id
        self._next_vertex_id += 1
        return vertex_id

    # ─── Lookups ───────────────────────────────────────────

    def get_vertex(self, vertex_id: int) -> Vertex:
        try:
            return self.vertices[vertex_id]
        except KeyError:
            raise UnknownVertex(vertex_id) from None

    def get_question(self, post_id: int) -> Optional[Question]:
        vertex_id = self.questions.get(post_id)
        return None if vertex_id is None else self.vertices[vertex_id]

    def get_answer(self, post_id: int) -> Optional[Answer]:
        vertex_id = self.answers.get(post_id)
        return None if vertex_id is None else self.vertices[vertex_id]

    def get_comment(self, comment_id: int) -> Optional[Comment]:
        vertex_id = self.comments.get(comment_id)
        return None if vertex_id is None else self.vertices[vertex_id]

    def get_user(self, user_id: int) -> Optional[User]:
        vertex_id = self.users.get(user_id)
        return None if vertex_id is None else self.vertices[vertex_id]

    def get_commentable(self, post_id: int) -> Optional[Post]:
        """Return the answer or question with this post id, answers first."""
        answer = self.get_answer(post_id)
        if answer is not None:
            return answer
        return self.get_question(post_id)

    def author_vertex_id(self, vertex_id: int) -> Optional[int]:
        """
        Resolve the user vertex that authored a post.

        Args:
            vertex_id: Id of a post vertex, or of a user (returned as is)

        Returns:
            Optional[int]: Vertex id of the author, or None when the author
            is not part of this graph
        """
        vertex = self.get_vertex(vertex_id)
        if isinstance(vertex, User):
            return vertex_id
        return self.users.get(vertex.author_user_id)

    # ─── Payload construction ──────────────────────────────

    def create_user(
        self,
        user_id: int,
        label: Optional[str] = None,
        reputation: int = 0,
        age: Optional[int] = None,
        upvotes: int = 0,
        downvotes: int = 0,
        account_id: int = 0,
    ) -> User:
        """
        Create a user payload with the next vertex id.

        The user is not added to the graph; pass it to ``add_vertex``.
        """
        user = User(
            vertex_id=self._next_vertex_id,
            label=label if label is not None else f"User {user_id}",
            user_id=user_id,
            reputation=reputation,
            age=age,
            upvotes=upvotes,
            downvotes=downvotes,
            account_id=account_id,
        )
        self._reserve_vertex_id()
        return user

    def create_placeholder_user(self) -> User:
        """
        Create a stand-in author for posts whose user was deleted.

        Placeholder users get negative user ids, unique within this graph.
        """
        user_id = self._next_placeholder_user_id
        self._next_placeholder_user_id -= 1
        return self.create_user(user_id, label="Default User", account_id=-1)

    def create_question(
        self,
        post_id: int,
        author_user_id: int,
        label: Optional[str] = None,
        raw_score: int = 0,
        body: str = "",
        view_count: int = 0,
        accepted_answer_id: Optional[int] = None,
        title: str = "",
        tag_ids: Iterable[int] = (),
        answer_count: int = 0,
        favorite_count: int = 0,
    ) -> Question:
        """Create a question payload with the next vertex id."""
        question = Question(
            vertex_id=self._next_vertex_id,
            label=label if label is not None else f"Question {len(self.questions) + 1}",
            post_id=post_id,
            author_user_id=author_user_id,
            raw_score=raw_score,
            body=body,
            view_count=view_count,
            accepted_answer_id=accepted_answer_id,
            title=title,
            tag_ids=tag_ids,
            answer_count=answer_count,
            favorite_count=favorite_count,
        )
        self._reserve_vertex_id()
        return question

    def create_answer(
        self,
        post_id: int,
        author_user_id: int,
        parent_question_post_id: int,
        label: Optional[str] = None,
        raw_score: int = 0,
        body: str = "",
    ) -> Answer:
        """
        Create an answer payload with the next vertex id.

        The answer's view count is a snapshot of its parent question's
        view count at this moment.

        Raises:
            MissingParent: If the parent question is not in this graph
        """
        parent = self.get_question(parent_question_post_id)
        if parent is None:
            raise MissingParent(parent_question_post_id, post_id)

        answer = Answer(
            vertex_id=self._next_vertex_id,
            label=label if label is not None else f"Answer {len(self.answers) + 1}",
            post_id=post_id,
            author_user_id=author_user_id,
            raw_score=raw_score,
            body=body,
            view_count=parent.view_count,
            parent_question_post_id=parent_question_post_id,
        )
        self._reserve_vertex_id()
        return answer

    def create_comment(
        self,
        comment_id: int,
        author_user_id: int,
        parent_post_id: int,
        label: Optional[str] = None,
        raw_score: int = 0,
        body: str = "",
    ) -> Comment:
        """
        Create a comment payload with the next vertex id.

        The parent may be a question or an answer. The comment's view count
        is a snapshot of the parent's view count at this moment.

        Raises:
            MissingParent: If the parent post is not in this graph
        """
        parent = self.get_commentable(parent_post_id)
        if parent is None:
            raise MissingParent(parent_post_id, comment_id)

        comment = Comment(
            vertex_id=self._next_vertex_id,
            label=label if label is not None else f"Comment {len(self.comments) + 1}",
            post_id=comment_id,
            author_user_id=author_user_id,
            raw_score=raw_score,
            body=body,
            view_count=parent.view_count,
            parent_post_id=parent_post_id,
        )
        self._reserve_vertex_id()
        return comment

    # ─── Mutation ──────────────────────────────────────────

    def _index_for(self, vertex: Vertex) -> Tuple[Dict[int, int], int]:
        if isinstance(vertex, Question):
            return self.questions, vertex.post_id
        if isinstance(vertex, Answer):
            return self.answers, vertex.post_id
        if isinstance(vertex, Comment):
            return self.comments, vertex.post_id
        if isinstance(vertex, User):
            return self.users, vertex.user_id
        raise UnsupportedVertexKind(vertex)

    def add_vertex(self, vertex: Vertex) -> None:
        """
        Add a question, answer, comment or user to the graph.

        Answers and comments are only accepted once their parent post is
        in the graph, whichever graph created them.

        Args:
            vertex: The payload to add

        Raises:
            UnsupportedVertexKind: If the payload is not one of the four variants
            MissingParent: If the parent of an answer or comment is not in the graph
            DuplicateVertexId: If the vertex id is already in the graph
            InvalidPayload: If the payload's domain id is already indexed
        """
        self._index_for(vertex)
        if isinstance(vertex, Answer):
            if self.get_question(vertex.parent_question_post_id) is None:
                raise MissingParent(vertex.parent_question_post_id, vertex.post_id)
        elif isinstance(vertex, Comment):
            if self.get_commentable(vertex.parent_post_id) is None:
                raise MissingParent(vertex.parent_post_id, vertex.post_id)
        self._insert(vertex)

    def _insert(self, vertex: Vertex) -> None:
        # derived graphs may hold an answer or comment without its parent
        index, domain_id = self._index_for(vertex)
        if vertex.vertex_id in self.vertices:
            raise DuplicateVertexId(vertex.vertex_id)
        if domain_id in index:
            raise InvalidPayload(
                f"{vertex.kind.value} with domain id {domain_id} is already in the graph"
            )

        self.vertices[vertex.vertex_id] = vertex
        index[domain_id] = vertex.vertex_id
        self._next_vertex_id = max(self._next_vertex_id, vertex.vertex_id + 1)

    def add_edge(self, from_id: int, to_id: int) -> None:
        """
        Add a directed edge.

        An undirected relation is two directed edges; use ``add_edge`` twice.
        Besides the adjacency list, this records the "authored by" and
        "replies to" back references for the known relation types.

        Raises:
            UnknownVertex: If either endpoint is not in the graph
        """
        from_vertex = self.get_vertex(from_id)
        to_vertex = self.get_vertex(to_id)

        from_vertex.out_edges.append(to_id)

        if isinstance(from_vertex, User):
            if isinstance(to_vertex, Question):
                from_vertex.authored_question_ids.append(to_vertex.post_id)
            elif isinstance(to_vertex, Answer):
                from_vertex.authored_answer_ids.append(to_vertex.post_id)
            elif isinstance(to_vertex, Comment):
                from_vertex.authored_comment_ids.append(to_vertex.post_id)
        elif isinstance(from_vertex, Question):
            if isinstance(to_vertex, Answer):
                from_vertex.answer_ids.append(to_vertex.post_id)
            elif isinstance(to_vertex, Comment):
                from_vertex.comment_ids.append(to_vertex.post_id)
        elif isinstance(from_vertex, Answer):
            if isinstance(to_vertex, Comment):
                from_vertex.comment_ids.append(to_vertex.post_id)

    def _link(self, a: int, b: int) -> None:
        self.add_edge(a, b)
        self.add_edge(b, a)

    def add_all_edges(self) -> None:
        """
        Wire every authorship and parent/child relation in one pass.

        Should only be called on a graph without edges. Relations whose
        author or parent is missing from this graph are skipped, which is
        what lets the same routine wire subgraphs holding only some of the
        original vertices.
        """
        for question_vid in list(self.questions.values()):
            question = self.vertices[question_vid]
            author_vid = self.users.get(question.author_user_id)
            if author_vid is not None:
                self._link(question_vid, author_vid)

        for answer_vid in list(self.answers.values()):
            answer = self.vertices[answer_vid]
            author_vid = self.users.get(answer.author_user_id)
            if author_vid is not None:
                self._link(answer_vid, author_vid)
            parent_vid = self.questions.get(answer.parent_question_post_id)
            if parent_vid is not None:
                self._link(answer_vid, parent_vid)

        for comment_vid in list(self.comments.values()):
            comment = self.vertices[comment_vid]
            author_vid = self.users.get(comment.author_user_id)
            if author_vid is not None:
                self._link(comment_vid, author_vid)
            parent = self.get_commentable(comment.parent_post_id)
            if parent is not None:
                self._link(comment_vid, parent.vertex_id)

        logger.debug(f"Wired edges for {self.topic}: |E|={self.number_of_edges():,}")

    # ─── Edge views ────────────────────────────────────────

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield every directed edge as a (from, to) pair."""
        for vertex_id, vertex in self.vertices.items():
            for to_id in vertex.out_edges:
                yield vertex_id, to_id

    def number_of_edges(self) -> int:
        return sum(len(vertex.out_edges) for vertex in self.vertices.values())

    # ─── Derived graphs ────────────────────────────────────

    def _empty_derived(self, topic: str) -> "TopicGraph":
        derived = TopicGraph(topic)
        derived._next_vertex_id = self._next_vertex_id
        derived._next_placeholder_user_id = self._next_placeholder_user_id
        return derived

    def induced_subgraph(self, vertex_ids: Iterable[int], topic: str) -> "TopicGraph":
        """
        Copy a set of vertices and the edges between them into a new graph.

        Every vertex is copied with ``copy_vertex`` so the result shares no
        objects with this graph. Edges leaving the vertex set are dropped.

        Args:
            vertex_ids: Ids of the vertices to keep, in insertion order
            topic: Topic name of the new graph

        Returns:
            TopicGraph: The induced subgraph

        Raises:
            UnknownVertex: If an id is not in this graph
        """
        subgraph = self._empty_derived(topic)
        for vertex_id in vertex_ids:
            if vertex_id not in subgraph.vertices:
                subgraph._insert(copy_vertex(self.get_vertex(vertex_id)))

        for vertex_id in subgraph.vertices:
            for to_id in self.vertices[vertex_id].out_edges:
                if to_id in subgraph.vertices:
                    subgraph.add_edge(vertex_id, to_id)

        return subgraph

    def transpose(self) -> "TopicGraph":
        """
        Build a copy of this graph with every edge reversed.

        Every authorship and parent/child relation is stored in both
        directions, so for a graph wired by ``add_all_edges`` the transpose
        has exactly the same edge set as the original.

        Returns:
            TopicGraph: A new, independent graph
        """
        transposed = self._empty_derived(f"{self.topic} (Transpose)")
        for vertex in self.vertices.values():
            transposed._insert(copy_vertex(vertex))

        for from_id, to_id in self.edges():
            transposed.add_edge(to_id, from_id)

        return transposed

    # ─── Stats ─────────────────────────────────────────────

    def summary(self) -> Dict[str, int]:
        """Counts of vertices by type and of directed edges."""
        return {
            "vertices": len(self.vertices),
            "edges": self.number_of_edges(),
            "users": len(self.users),
            "questions": len(self.questions),
            "answers": len(self.answers),
            "comments": len(self.comments),
        }
