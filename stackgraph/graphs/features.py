"""
Per-question features for usefulness regression.

Every question in a topic graph becomes one row describing the question,
its asker, its answers and its egonet. Rates are per view of the
question; a question with no recorded views gets 0.0 for every rate.
"""

import logging
from collections import Counter
from typing import Any, Dict, List

import polars as pl

from .egonet import build_egonet
from .topic_graph import TopicGraph
from .vertices import Question

logger = logging.getLogger(__name__)

QUESTION_FEATURE_SCHEMA = {
    "question_id": pl.Int64,
    "vertex_id": pl.Int64,
    "usefulness": pl.Float64,
    "asker_reputation": pl.Int64,
    "asker_questions": pl.Int64,
    "asker_answers": pl.Int64,
    "asker_comments": pl.Int64,
    "body_length": pl.Int64,
    "num_tags": pl.Int64,
    "avg_tag_questions": pl.Float64,
    "num_answers": pl.Int64,
    "accepted_answer": pl.Boolean,
    "answers_per_view": pl.Float64,
    "comments_per_view": pl.Float64,
    "favorites_per_view": pl.Float64,
    "asker_comments_per_view": pl.Float64,
    "top_answer_usefulness": pl.Float64,
    "avg_answer_usefulness": pl.Float64,
    "avg_answer_comments_per_view": pl.Float64,
    "avg_answerer_reputation": pl.Float64,
    "egonet_size": pl.Int64,
}


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _question_row(graph: TopicGraph, question: Question, tag_counts: Counter) -> Dict[str, Any]:
    asker = graph.get_user(question.author_user_id)
    answers = [a for a in map(graph.get_answer, question.answer_ids) if a is not None]
    answerers = [u for u in (graph.get_user(a.author_user_id) for a in answers) if u is not None]

    comments = [c for c in map(graph.get_comment, question.comment_ids) if c is not None]
    asker_comments_here = sum(1 for c in comments if c.author_user_id == question.author_user_id)

    return {
        "question_id": question.post_id,
        "vertex_id": question.vertex_id,
        "usefulness": question.usefulness,
        "asker_reputation": asker.reputation if asker is not None else None,
        "asker_questions": len(asker.authored_question_ids) if asker is not None else None,
        "asker_answers": len(asker.authored_answer_ids) if asker is not None else None,
        "asker_comments": len(asker.authored_comment_ids) if asker is not None else None,
        "body_length": len(question.body),
        "num_tags": len(question.tag_ids),
        "avg_tag_questions": _mean([tag_counts[t] for t in question.tag_ids]),
        "num_answers": len(answers),
        "accepted_answer": question.accepted_answer_id is not None,
        "answers_per_view": question.answers_per_view,
        "comments_per_view": question.comments_per_view,
        "favorites_per_view": question.favorites_per_view,
        "asker_comments_per_view": (
            asker_comments_here / question.view_count if question.view_count else 0.0
        ),
        "top_answer_usefulness": max((a.usefulness for a in answers), default=0.0),
        "avg_answer_usefulness": _mean([a.usefulness for a in answers]),
        "avg_answer_comments_per_view": _mean([a.comments_per_view for a in answers]),
        "avg_answerer_reputation": _mean([float(u.reputation) for u in answerers]),
        # the egonet is centred on the asker, so it needs one
        "egonet_size": len(build_egonet(graph, question.vertex_id)) if asker is not None else None,
    }


def question_features(graph: TopicGraph, answered_only: bool = False) -> pl.DataFrame:
    """
    Build the feature table for every question in the graph.

    Args:
        graph: A topic graph wired with ``add_all_edges``
        answered_only: Keep only questions with at least one answer

    Returns:
        pl.DataFrame: One row per question, in question insertion order
    """
    questions: List[Question] = [graph.vertices[v] for v in graph.questions.values()]
    tag_counts: Counter = Counter(t for q in questions for t in q.tag_ids)

    rows: List[Dict[str, Any]] = []
    for question in questions:
        if answered_only and not question.answer_ids:
            continue
        rows.append(_question_row(graph, question, tag_counts))

    logger.info(f"Computed features for {len(rows):,} of {len(questions):,} questions")
    return pl.DataFrame(rows, schema=QUESTION_FEATURE_SCHEMA)

