"""
Pipeline node function definitions for topic graph analytics.
"""

import logging
import pickle
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl
from kedro.pipeline import Pipeline, node
from tqdm import tqdm

from stackgraph.graphs.components import component_roots
from stackgraph.graphs.egonet import build_egonet
from stackgraph.graphs.export import dense_index, detect_communities, write_linked_list
from stackgraph.graphs.features import question_features
from stackgraph.graphs.loader import load_topic_graph
from stackgraph.graphs.topic_graph import DEFAULT_TOPIC, TopicGraph
from stackgraph.pipeline.data_layer.nodes import read_table

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Default paths
DEFAULT_OUTPUT_DIR = Path("data/graph")


def save_graph(graph: TopicGraph, output_file: Path) -> Path:
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "wb") as f:
        pickle.dump(graph, f, protocol=5)
    return output_file


def load_graph(graph_file: Path) -> TopicGraph:
    with open(graph_file, "rb") as f:
        return pickle.load(f)


def build_topic_graph_node(parquet_files: Dict[str, Path], params: Dict[str, Any]) -> Path:
    """
    Node function for building the topic graph from the dump tables.

    Args:
        parquet_files: Table name -> Parquet path (Users, Posts, Comments, optional Tags)
        params: Pipeline parameters

    Returns:
        Path: Path to the pickled topic graph
    """
    output_dir = Path(params.get("output_dir", DEFAULT_OUTPUT_DIR))
    topic = params.get("topic", DEFAULT_TOPIC)

    missing = [tbl for tbl in ("Users", "Posts", "Comments") if tbl not in parquet_files]
    if missing:
        raise ValueError(f"Missing required tables: {', '.join(missing)}")

    tags = read_table(parquet_files["Tags"]) if "Tags" in parquet_files else None
    graph = load_topic_graph(
        users=read_table(parquet_files["Users"]),
        posts=read_table(parquet_files["Posts"]),
        comments=read_table(parquet_files["Comments"]),
        tags=tags,
        topic=topic,
    )

    for key, value in graph.summary().items():
        logger.info(f"{topic} {key}: {value:,}")

    return save_graph(graph, output_dir / "topic_graph.pkl")


def compute_scc_node(graph_file: Path, params: Dict[str, Any]) -> Dict[str, Path]:
    """
    Node function for strongly connected component membership.

    Writes one row per vertex (vertex_id, kind, component_root,
    component_size) and pickles the largest component.

    Args:
        graph_file: Path to the pickled topic graph
        params: Pipeline parameters

    Returns:
        Dict[str, Path]: Paths to the membership table and the largest component
    """
    output_dir = Path(params.get("output_dir", DEFAULT_OUTPUT_DIR))
    output_dir.mkdir(parents=True, exist_ok=True)
    graph = load_graph(graph_file)

    roots = component_roots(graph)
    sizes: Dict[int, int] = {}
    for root in roots.values():
        sizes[root] = sizes.get(root, 0) + 1

    membership = pl.DataFrame(
        {
            "vertex_id": list(roots),
            "kind": [graph.vertices[v].kind.value for v in roots],
            "component_root": list(roots.values()),
            "component_size": [sizes[r] for r in roots.values()],
        },
        schema={
            "vertex_id": pl.Int64,
            "kind": pl.Utf8,
            "component_root": pl.Int64,
            "component_size": pl.Int64,
        },
    )
    membership_file = output_dir / "scc_membership.parquet"
    membership.write_parquet(membership_file)
    logger.info(
        f"Found {len(sizes):,} strongly connected components, "
        f"largest has {max(sizes.values(), default=0):,} vertices"
    )

    largest_root = max(sizes, key=sizes.get, default=None)
    if largest_root is None:
        largest = TopicGraph(f"Empty SCC of {graph.topic}")
    else:
        largest = graph.induced_subgraph(
            [v for v, root in roots.items() if root == largest_root],
            topic=f"SCC with parent '{graph.topic}' and root {largest_root}",
        )
    largest_file = save_graph(largest, output_dir / "largest_scc.pkl")

    return {"scc_membership": membership_file, "largest_scc": largest_file}


def _egonet_centers(graph: TopicGraph, params: Dict[str, Any]) -> List[int]:
    centers: Optional[List[int]] = params.get("egonet_centers")
    if centers:
        return list(centers)

    # Default to the most reputable users
    max_egonets = params.get("max_egonets", 100)
    users = sorted(
        graph.users.values(),
        key=lambda v: (-graph.vertices[v].reputation, v),
    )
    return users[:max_egonets]


def compute_egonets_node(graph_file: Path, params: Dict[str, Any]) -> Path:
    """
    Node function for egonet size statistics.

    Builds the egonet of each configured center (``egonet_centers``, or the
    ``max_egonets`` highest-reputation users) and records its size by type.

    Args:
        graph_file: Path to the pickled topic graph
        params: Pipeline parameters

    Returns:
        Path: Path to the egonet statistics Parquet file
    """
    output_dir = Path(params.get("output_dir", DEFAULT_OUTPUT_DIR))
    output_dir.mkdir(parents=True, exist_ok=True)
    graph = load_graph(graph_file)

    records = []
    for center in tqdm(_egonet_centers(graph, params), desc="Building egonets"):
        egonet = build_egonet(graph, center)
        records.append(
            {"center": center, "center_user": graph.author_vertex_id(center), **egonet.summary()}
        )

    egonets = pl.DataFrame(records) if records else pl.DataFrame(
        schema={
            "center": pl.Int64,
            "center_user": pl.Int64,
            "vertices": pl.Int64,
            "edges": pl.Int64,
            "users": pl.Int64,
            "questions": pl.Int64,
            "answers": pl.Int64,
            "comments": pl.Int64,
        }
    )
    output_file = output_dir / "egonet_sizes.parquet"
    egonets.write_parquet(output_file)
    logger.info(f"Built {len(records):,} egonets")
    return output_file


def question_features_node(graph_file: Path, params: Dict[str, Any]) -> Path:
    """
    Node function for the per-question feature table.

    Args:
        graph_file: Path to the pickled topic graph
        params: Pipeline parameters (answered_questions_only)

    Returns:
        Path: Path to the question features Parquet file
    """
    output_dir = Path(params.get("output_dir", DEFAULT_OUTPUT_DIR))
    output_dir.mkdir(parents=True, exist_ok=True)
    graph = load_graph(graph_file)

    features = question_features(graph, answered_only=params.get("answered_questions_only", False))
    output_file = output_dir / "question_features.parquet"
    features.write_parquet(output_file)
    return output_file


def export_graph_node(graph_file: Path, params: Dict[str, Any]) -> Dict[str, Path]:
    """
    Node function for exporting the graph for external community tools.

    Writes the linked-list edge file and a vertex index table mapping each
    dense index back to its vertex id, kind and label.

    Args:
        graph_file: Path to the pickled topic graph
        params: Pipeline parameters

    Returns:
        Dict[str, Path]: Paths to the linked list and the vertex index
    """
    output_dir = Path(params.get("output_dir", DEFAULT_OUTPUT_DIR))
    graph = load_graph(graph_file)

    linked_list_file = write_linked_list(graph, output_dir / "linked_list.txt")

    index = dense_index(graph)
    vertex_index = pl.DataFrame(
        {
            "dense_index": list(index.values()),
            "vertex_id": list(index),
            "kind": [graph.vertices[v].kind.value for v in index],
            "label": [graph.vertices[v].label for v in index],
        },
        schema={
            "dense_index": pl.Int64,
            "vertex_id": pl.Int64,
            "kind": pl.Utf8,
            "label": pl.Utf8,
        },
    )
    vertex_index_file = output_dir / "vertex_index.parquet"
    vertex_index.write_parquet(vertex_index_file)

    return {"linked_list": linked_list_file, "vertex_index": vertex_index_file}


def detect_communities_node(graph_file: Path, params: Dict[str, Any]) -> Path:
    """
    Node function for Louvain community detection.

    Args:
        graph_file: Path to the pickled topic graph
        params: Pipeline parameters (louvain_resolution, louvain_seed)

    Returns:
        Path: Path to the (vertex_id, community) Parquet file
    """
    output_dir = Path(params.get("output_dir", DEFAULT_OUTPUT_DIR))
    output_dir.mkdir(parents=True, exist_ok=True)
    graph = load_graph(graph_file)

    communities = detect_communities(
        graph,
        resolution=params.get("louvain_resolution", 1.0),
        seed=params.get("louvain_seed", 42),
    )

    vertex_ids = []
    community_ids = []
    for i, community in enumerate(communities):
        vertex_ids.extend(community.vertices)
        community_ids.extend([i] * len(community))

    assignment = pl.DataFrame(
        {"vertex_id": vertex_ids, "community": community_ids},
        schema={"vertex_id": pl.Int64, "community": pl.Int64},
    )
    output_file = output_dir / "communities.parquet"
    assignment.write_parquet(output_file)
    return output_file


def create_pipeline(**kwargs) -> Pipeline:
    """Create the topic graph analytics pipeline."""
    return Pipeline(
        [
            node(
                build_topic_graph_node,
                inputs=["raw_parquet_files", "params:graphs"],
                outputs="topic_graph_file",
                name="build_topic_graph",
            ),
            node(
                compute_scc_node,
                inputs=["topic_graph_file", "params:graphs"],
                outputs="scc_files",
                name="compute_scc",
            ),
            node(
                compute_egonets_node,
                inputs=["topic_graph_file", "params:graphs"],
                outputs="egonet_sizes_file",
                name="compute_egonets",
            ),
            node(
                question_features_node,
                inputs=["topic_graph_file", "params:graphs"],
                outputs="question_features_file",
                name="compute_question_features",
            ),
            node(
                export_graph_node,
                inputs=["topic_graph_file", "params:graphs"],
                outputs="graph_export_files",
                name="export_graph",
            ),
            node(
                detect_communities_node,
                inputs=["topic_graph_file", "params:graphs"],
                outputs="communities_file",
                name="detect_communities",
            ),
        ]
    )
