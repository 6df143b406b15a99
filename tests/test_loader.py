"""
Unit tests for building a topic graph from data dump tables.
"""
import polars as pl
import pytest

from stackgraph.graphs.loader import load_topic_graph, parse_tags
from stackgraph.graphs.vertices import Answer, Comment, Question, User


@pytest.fixture
def dump_tables():
    """Users, Posts, Comments and Tags frames shaped like the data dump."""
    users = pl.DataFrame(
        {
            "Id": [1, 2, 3],
            "DisplayName": ["Ananda", "Sariputta", None],
            "Reputation": [120, 45, 1],
            "Age": [30, None, None],
            "UpVotes": [5, 2, 0],
            "DownVotes": [0, 1, 0],
            "AccountId": [1001, 1002, 1003],
        }
    )
    posts = pl.DataFrame(
        {
            "Id": [10, 11, 20, 21, 40, 22],
            "PostTypeId": [1, 1, 2, 2, 5, 2],
            "ParentId": [None, None, 10, 11, None, 99],
            "AcceptedAnswerId": [20, None, None, None, None, None],
            "Score": [7, 1, 3, 0, 0, 2],
            "ViewCount": [70, 12, None, None, None, None],
            "Body": ["<p>What is dukkha?</p>", "<p>Jhana?</p>", "<p>Suffering</p>", "<p>Absorption</p>", "", ""],
            "OwnerUserId": [1, None, 2, 3, 1, 2],
            "Title": ["Dukkha", "Jhana", None, None, None, None],
            "Tags": ["<theravada><suffering>", "|meditation|", None, None, None, None],
            "AnswerCount": [1, 1, None, None, None, None],
            "FavoriteCount": [2, None, None, None, None, None],
        }
    )
    comments = pl.DataFrame(
        {
            "Id": [30, 31, 32],
            "PostId": [20, 11, 404],
            "Score": [1, 0, 0],
            "Text": ["Well put", "See the suttas", "Orphan"],
            "UserId": [3, None, 1],
        }
    )
    tags = pl.DataFrame(
        {
            "Id": [1, 2, 3],
            "TagName": ["theravada", "suffering", "meditation"],
        }
    )
    return users, posts, comments, tags


def test_parse_tags():
    assert parse_tags("<python><pandas>") == ["python", "pandas"]
    assert parse_tags("|python|pandas|") == ["python", "pandas"]
    assert parse_tags("<c++>") == ["c++"]
    assert parse_tags("") == []
    assert parse_tags(None) == []


def test_load_topic_graph(dump_tables):
    users, posts, comments, tags = dump_tables

    graph = load_topic_graph(users, posts, comments, tags, topic="Buddhism")

    assert graph.topic == "Buddhism"
    assert set(graph.questions) == {10, 11}
    assert set(graph.answers) == {20, 21}
    assert set(graph.comments) == {30, 31}
    # two placeholder authors: question 11 and comment 31
    assert set(graph.users) == {1, 2, 3, -1, -2}


def test_users_are_loaded_first(dump_tables):
    users, posts, comments, tags = dump_tables

    graph = load_topic_graph(users, posts, comments, tags)

    assert [graph.users[u] for u in (1, 2, 3)] == [1, 2, 3]
    assert all(isinstance(graph.vertices[v], User) for v in (1, 2, 3))


def test_payload_fields(dump_tables):
    users, posts, comments, tags = dump_tables

    graph = load_topic_graph(users, posts, comments, tags)

    ananda = graph.get_user(1)
    assert ananda.label == "Ananda"
    assert ananda.reputation == 120
    assert ananda.age == 30
    assert ananda.account_id == 1001
    assert graph.get_user(3).label == "User 3"

    question = graph.get_question(10)
    assert isinstance(question, Question)
    assert question.title == "Dukkha"
    assert question.accepted_answer_id == 20
    assert question.tag_ids == {1, 2}
    assert question.favorite_count == 2
    assert question.label == "Question 1"
    assert graph.get_question(11).tag_ids == {3}

    answer = graph.get_answer(20)
    assert isinstance(answer, Answer)
    assert answer.view_count == 70
    assert answer.raw_score == 3

    comment = graph.get_comment(30)
    assert isinstance(comment, Comment)
    assert comment.body == "Well put"
    assert comment.view_count == 70


def test_edges_are_wired(dump_tables):
    users, posts, comments, tags = dump_tables

    graph = load_topic_graph(users, posts, comments, tags)

    ananda = graph.get_user(1)
    question = graph.get_question(10)
    answer = graph.get_answer(20)
    assert question.vertex_id in ananda.out_edges
    assert ananda.vertex_id in question.out_edges
    assert question.answer_ids == [20]
    assert answer.comment_ids == [30]
    assert graph.get_user(2).authored_answer_ids == [20]


def test_placeholder_authors_are_wired(dump_tables):
    users, posts, comments, tags = dump_tables

    graph = load_topic_graph(users, posts, comments, tags)

    question = graph.get_question(11)
    placeholder = graph.get_user(question.author_user_id)
    assert placeholder.label == "Default User"
    assert placeholder.authored_question_ids == [11]


def test_orphans_and_other_post_types_are_skipped(dump_tables):
    users, posts, comments, tags = dump_tables

    graph = load_topic_graph(users, posts, comments, tags)

    # wiki post 40, answer 22 to a missing question, comment 32 on a missing post
    assert graph.get_question(40) is None
    assert graph.get_answer(22) is None
    assert graph.get_comment(32) is None
    assert graph.summary()["vertices"] == 11


def test_tags_are_optional(dump_tables):
    users, posts, comments, _ = dump_tables

    graph = load_topic_graph(users, posts, comments)

    assert graph.get_question(10).tag_ids == set()


def test_unknown_tags_are_ignored(dump_tables):
    users, posts, comments, _ = dump_tables
    tags = pl.DataFrame({"Id": [1], "TagName": ["theravada"]})

    graph = load_topic_graph(users, posts, comments, tags)

    assert graph.get_question(10).tag_ids == {1}
    assert graph.get_question(11).tag_ids == set()
