"""
Build a topic graph from Stack Exchange data dump tables.

Tables are polars DataFrames using the dump's column names (as produced by
``stackgraph.pipeline.data_layer.nodes.dump_to_parquet``). Records are added
in dependency order, users, questions, answers, comments, and edges are
wired once at the end.
"""

import logging
import re
from typing import Any, Dict, List, Optional

import polars as pl

from .topic_graph import DEFAULT_TOPIC, TopicGraph

logger = logging.getLogger(__name__)

QUESTION_POST_TYPE = 1
ANSWER_POST_TYPE = 2

# "<python><pandas>" in XML dumps, "|python|pandas|" in newer exports
_TAG_PATTERN = re.compile(r"<([^<>]+)>|\|([^|]+)(?=\|)")


def parse_tags(raw: Optional[str]) -> List[str]:
    """
    Split a raw question tag string into tag names.

    Args:
        raw: Tag string such as ``"<python><pandas>"`` or ``"|python|pandas|"``

    Returns:
        List[str]: Tag names in their original order
    """
    if not raw:
        return []
    return [angled or piped for angled, piped in _TAG_PATTERN.findall(raw)]


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Coerce a table cell to int; nulls and blanks become ``default``."""
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    return int(value)


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _rows(df: Optional[pl.DataFrame]):
    return [] if df is None else df.iter_rows(named=True)


def _author_id(graph: TopicGraph, value: Any) -> int:
    """Return the author's user id, creating a placeholder user for deleted owners."""
    user_id = _as_int(value)
    if user_id is None:
        user = graph.create_placeholder_user()
        graph.add_vertex(user)
        return user.user_id
    return user_id


def _tag_index(tags: Optional[pl.DataFrame]) -> Dict[str, int]:
    return {
        _as_str(row.get("TagName")): _as_int(row.get("Id"))
        for row in _rows(tags)
        if row.get("Id") is not None
    }


def load_users(graph: TopicGraph, users: pl.DataFrame) -> int:
    count = 0
    for row in _rows(users):
        user_id = _as_int(row.get("Id"))
        display_name = row.get("DisplayName")
        graph.add_vertex(
            graph.create_user(
                user_id,
                label=str(display_name) if display_name is not None else None,
                reputation=_as_int(row.get("Reputation"), 0),
                age=_as_int(row.get("Age")),
                upvotes=_as_int(row.get("UpVotes"), 0),
                downvotes=_as_int(row.get("DownVotes"), 0),
                account_id=_as_int(row.get("AccountId"), 0),
            )
        )
        count += 1
    return count


def load_questions(graph: TopicGraph, posts: pl.DataFrame, tag_ids: Dict[str, int]) -> int:
    count = 0
    for row in _rows(posts):
        if _as_int(row.get("PostTypeId")) != QUESTION_POST_TYPE:
            continue

        post_id = _as_int(row.get("Id"))
        question_tags = []
        for name in parse_tags(row.get("Tags")):
            if name in tag_ids:
                question_tags.append(tag_ids[name])
            elif tag_ids:
                logger.warning(f"Question {post_id} has unknown tag {name!r}, ignoring it")

        graph.add_vertex(
            graph.create_question(
                post_id,
                _author_id(graph, row.get("OwnerUserId")),
                raw_score=_as_int(row.get("Score"), 0),
                body=_as_str(row.get("Body")),
                view_count=_as_int(row.get("ViewCount"), 0),
                accepted_answer_id=_as_int(row.get("AcceptedAnswerId")),
                title=_as_str(row.get("Title")),
                tag_ids=question_tags,
                answer_count=_as_int(row.get("AnswerCount"), 0),
                favorite_count=_as_int(row.get("FavoriteCount"), 0),
            )
        )
        count += 1
    return count


def load_answers(graph: TopicGraph, posts: pl.DataFrame) -> int:
    count = 0
    for row in _rows(posts):
        if _as_int(row.get("PostTypeId")) != ANSWER_POST_TYPE:
            continue

        post_id = _as_int(row.get("Id"))
        parent_id = _as_int(row.get("ParentId"))
        if parent_id is None or graph.get_question(parent_id) is None:
            logger.warning(f"Skipping answer {post_id}: parent question {parent_id} not loaded")
            continue

        graph.add_vertex(
            graph.create_answer(
                post_id,
                _author_id(graph, row.get("OwnerUserId")),
                parent_id,
                raw_score=_as_int(row.get("Score"), 0),
                body=_as_str(row.get("Body")),
            )
        )
        count += 1
    return count


def load_comments(graph: TopicGraph, comments: pl.DataFrame) -> int:
    count = 0
    for row in _rows(comments):
        comment_id = _as_int(row.get("Id"))
        parent_id = _as_int(row.get("PostId"))
        if parent_id is None or graph.get_commentable(parent_id) is None:
            logger.warning(f"Skipping comment {comment_id}: parent post {parent_id} not loaded")
            continue

        graph.add_vertex(
            graph.create_comment(
                comment_id,
                _author_id(graph, row.get("UserId")),
                parent_id,
                raw_score=_as_int(row.get("Score"), 0),
                body=_as_str(row.get("Text")),
            )
        )
        count += 1
    return count


def load_topic_graph(
    users: pl.DataFrame,
    posts: pl.DataFrame,
    comments: pl.DataFrame,
    tags: Optional[pl.DataFrame] = None,
    topic: str = DEFAULT_TOPIC,
) -> TopicGraph:
    """
    Build and wire a topic graph from data dump tables.

    Posts that are neither questions nor answers (wiki entries, tag
    excerpts, ...) are ignored, as are answers and comments whose parent
    is not in the graph. Posts and comments without an owner get a
    placeholder author.

    Args:
        users: Users table (Id, DisplayName, Reputation, Age, UpVotes, DownVotes, AccountId)
        posts: Posts table (Id, PostTypeId, ParentId, AcceptedAnswerId, Score,
            ViewCount, Body, OwnerUserId, Title, Tags, AnswerCount, FavoriteCount)
        comments: Comments table (Id, PostId, Score, Text, UserId)
        tags: Optional Tags table (Id, TagName) used to resolve question tags
        topic: Name of the community

    Returns:
        TopicGraph: The populated graph with all edges wired
    """
    logger.info(f"Loading topic graph for {topic}")
    graph = TopicGraph(topic)

    n_users = load_users(graph, users)
    n_questions = load_questions(graph, posts, _tag_index(tags))
    n_answers = load_answers(graph, posts)
    n_comments = load_comments(graph, comments)
    graph.add_all_edges()

    logger.info(
        f"Loaded {n_users:,} users, {n_questions:,} questions, "
        f"{n_answers:,} answers, {n_comments:,} comments into {topic}"
    )
    logger.info(f"Topic graph {topic}: |V|={len(graph):,}, |E|={graph.number_of_edges():,}")
    return graph
