"""
Data layer pipeline for the Stack Exchange topic graph project.

This pipeline converts the XML data dump (Users, Posts, Comments, Tags)
into Parquet tables.
"""

from kedro.pipeline import Pipeline, node

from .nodes import convert_dump_node


def create_pipeline(**kwargs) -> Pipeline:
    """Create the data layer pipeline."""
    return Pipeline(
        [
            node(
                convert_dump_node,
                inputs=["params:data_layer"],
                outputs="raw_parquet_files",
                name="dump_to_parquet",
            ),
        ]
    )
