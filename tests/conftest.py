"""
Pytest configuration file for the stackgraph project.

This file contains shared fixtures and configuration for the test suite.
"""
from typing import Dict, Tuple

import pytest

from stackgraph.graphs.topic_graph import TopicGraph


@pytest.fixture
def project_dirs(tmp_path):
    """
    Create the data directory structure for a test project.

    Returns:
        dict: A dictionary of paths to the created directories.
    """
    dirs = {
        "base": tmp_path,
        "raw": tmp_path / "data" / "raw",
        "parquet_raw": tmp_path / "data" / "parquet" / "raw",
        "graph": tmp_path / "data" / "graph",
    }

    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)

    return dirs


def add_users(graph: TopicGraph, *names: str) -> Dict[str, int]:
    """Add one user per name (user ids 1, 2, ...) and return name -> vertex id."""
    ids = {}
    for user_id, name in enumerate(names, start=1):
        user = graph.create_user(user_id, label=name)
        graph.add_vertex(user)
        ids[name] = user.vertex_id
    return ids


@pytest.fixture
def qa_graph() -> Tuple[TopicGraph, Dict[str, int]]:
    """
    A small community wired with ``add_all_edges``.

    U1 asks Q1 and U2 answers it with A1. U3 asks an unrelated Q2,
    which U4 comments on with C1.

    Returns:
        tuple: (graph, name -> vertex id)
    """
    graph = TopicGraph("Buddhism")
    ids = add_users(graph, "U1", "U2", "U3", "U4")

    q1 = graph.create_question(10, author_user_id=1, title="What is dukkha?", view_count=40)
    graph.add_vertex(q1)
    q2 = graph.create_question(11, author_user_id=3, title="Unrelated", view_count=8)
    graph.add_vertex(q2)
    a1 = graph.create_answer(20, author_user_id=2, parent_question_post_id=10, raw_score=4)
    graph.add_vertex(a1)
    c1 = graph.create_comment(30, author_user_id=4, parent_post_id=11)
    graph.add_vertex(c1)

    graph.add_all_edges()
    ids.update({"Q1": q1.vertex_id, "Q2": q2.vertex_id, "A1": a1.vertex_id, "C1": c1.vertex_id})
    return graph, ids


@pytest.fixture
def confluence_graph() -> Tuple[TopicGraph, Dict[str, int]]:
    """
    A community where two of U1's contacts meet on a third question.

    U1 asks Q1; U2 and U3 answer it (A1, A2). U2 asks Q3 and U3 comments
    on it (C1). U2 also asks Q4, which nobody else touches.

    Returns:
        tuple: (graph, name -> vertex id)
    """
    graph = TopicGraph("Confluence")
    ids = add_users(graph, "U1", "U2", "U3")

    posts = [
        ("Q1", graph.create_question(10, author_user_id=1)),
        ("Q3", graph.create_question(13, author_user_id=2)),
        ("Q4", graph.create_question(14, author_user_id=2)),
    ]
    for _, post in posts:
        graph.add_vertex(post)

    children = [
        ("A1", graph.create_answer(20, author_user_id=2, parent_question_post_id=10)),
        ("A2", graph.create_answer(21, author_user_id=3, parent_question_post_id=10)),
    ]
    for _, post in children:
        graph.add_vertex(post)

    c1 = graph.create_comment(30, author_user_id=3, parent_post_id=13)
    graph.add_vertex(c1)

    graph.add_all_edges()
    ids.update({name: post.vertex_id for name, post in posts + children})
    ids["C1"] = c1.vertex_id
    return graph, ids


@pytest.fixture
def cycle_graph() -> Tuple[TopicGraph, Dict[str, int]]:
    """
    Users A, B, C in a directed cycle A -> B -> C -> A, and an isolated D.

    Returns:
        tuple: (graph, name -> vertex id)
    """
    graph = TopicGraph("Cycle")
    ids = add_users(graph, "A", "B", "C", "D")
    graph.add_edge(ids["A"], ids["B"])
    graph.add_edge(ids["B"], ids["C"])
    graph.add_edge(ids["C"], ids["A"])
    return graph, ids
