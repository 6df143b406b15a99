"""
Pipeline node function definitions for the data layer.
"""

import logging
import shutil
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl

logger = logging.getLogger(__name__)

# Integer columns of the Stack Exchange data dump; everything else stays a string
INT_COLUMNS: Dict[str, List[str]] = {
    "Users": ["Id", "Reputation", "Age", "UpVotes", "DownVotes", "AccountId", "Views"],
    "Posts": [
        "Id",
        "PostTypeId",
        "ParentId",
        "AcceptedAnswerId",
        "Score",
        "ViewCount",
        "OwnerUserId",
        "AnswerCount",
        "CommentCount",
        "FavoriteCount",
    ],
    "Comments": ["Id", "PostId", "Score", "UserId"],
    "Tags": ["Id", "Count", "ExcerptPostId", "WikiPostId"],
}

DATE_COLUMNS = ["CreationDate", "LastAccessDate", "LastActivityDate", "LastEditDate"]
DUMP_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%.f"


def read_dump_xml(xml_file: Path) -> pl.DataFrame:
    """
    Read one data dump XML file into a DataFrame.

    Each ``<row .../>`` element becomes one row, its attributes the columns.
    Attributes absent from a row are null.

    Args:
        xml_file: Path to a file such as ``Posts.xml``

    Returns:
        pl.DataFrame: One string column per attribute seen in the file
    """
    rows = []
    root = None
    for event, elem in ET.iterparse(xml_file, events=("start", "end")):
        if root is None:
            root = elem
        if event == "end" and elem.tag == "row":
            rows.append(dict(elem.attrib))
            # Detach finished rows so memory stays flat on large dumps
            root.clear()

    if not rows:
        return pl.DataFrame()
    return pl.from_dicts(rows, infer_schema_length=None)


def _cast_dump_columns(df: pl.DataFrame, table: str) -> pl.DataFrame:
    casts = [
        pl.col(c).cast(pl.Int64, strict=False)
        for c in INT_COLUMNS.get(table, [])
        if c in df.columns
    ]
    casts += [
        pl.col(c).str.strptime(pl.Datetime, DUMP_DATE_FORMAT, strict=False)
        for c in DATE_COLUMNS
        if c in df.columns
    ]
    return df.with_columns(casts) if casts else df


def dump_to_parquet(src_dir: Path, dst_dir: Path, tables: List[str]) -> Dict[str, Path]:
    """
    Convert Stack Exchange data dump XML files to Parquet format.

    Args:
        src_dir: Directory holding the dump's ``<Table>.xml`` files
        dst_dir: Destination directory for Parquet files
        tables: Table names to convert, e.g. ``["Users", "Posts"]``

    Returns:
        Dict[str, Path]: Table name -> output Parquet file path
    """
    src_dir = Path(src_dir)
    dst_dir = Path(dst_dir)

    if not src_dir.exists():
        raise FileNotFoundError(f"Source directory {src_dir} does not exist")
    if not src_dir.is_dir():
        raise NotADirectoryError(f"{src_dir} is not a directory")

    dst_dir.mkdir(parents=True, exist_ok=True)
    outputs = {}

    for tbl in tables:
        src_file = src_dir / f"{tbl}.xml"
        if not src_file.exists():
            logger.warning(f"{src_file} does not exist, skipping {tbl}")
            continue

        output_path = dst_dir / f"{tbl}.parquet"
        logger.info(f"Converting {tbl} from {src_file} to {output_path}")

        # Clean up existing output path to prevent IsADirectoryError
        if output_path.exists():
            if output_path.is_dir():
                shutil.rmtree(output_path)
            else:
                output_path.unlink()

        df = _cast_dump_columns(read_dump_xml(src_file), tbl)
        df.write_parquet(output_path, compression="zstd")

        outputs[tbl] = output_path
        logger.info(f"Converted {tbl}: {df.height:,} rows")

    return outputs


def read_table(path: Union[str, Path]) -> pl.DataFrame:
    """
    Read a Parquet or CSV table.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is neither .parquet nor .csv
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table {path} does not exist")

    if path.suffix == ".parquet":
        return pl.read_parquet(path)
    if path.suffix == ".csv":
        return pl.read_csv(path, infer_schema_length=10000)
    raise ValueError(f"Unsupported table format: {path.suffix}")


def convert_dump_node(params: Dict) -> Dict[str, Path]:
    """
    Node function for converting the data dump to Parquet.

    Args:
        params: Pipeline parameters (src_dir, dst_dir, tables)

    Returns:
        Dict[str, Path]: Table name -> Parquet file path
    """
    src_dir = Path(params.get("src_dir", "data/raw"))
    dst_dir = Path(params.get("dst_dir", "data/parquet/raw"))
    tables: Optional[List[str]] = params.get("tables")
    if not tables:
        tables = list(INT_COLUMNS)

    return dump_to_parquet(src_dir, dst_dir, tables)
