"""Command-line contract of the external dictionary tools.

Builds ``PipelineStage`` values for each tool and names the files they
leave in their output directory.
"""

from pathlib import Path
from typing import Literal, Optional, Sequence

from .config import ToolCommands
from .models import PipelineStage

ARTICLES_ARCHIVE = "Articles.xtbdb"
RAW_DATABASE = "Articles.rawdb"
TITLE_LIST = "Titles.txt"
BASE_NAME_LIST = "BaseNames.txt"
ANNOTATED_TEXT = "Yomi.txt"
METADATA_FILE = "Info.plist"

INTERMEDIATE_FILES = (RAW_DATABASE, TITLE_LIST, BASE_NAME_LIST, ANNOTATED_TEXT)

# Namespaces the extractor drops from the article stream.
EXCLUDED_CATEGORIES = (
    "template",
    "category",
    "file",
    "portal",
    "help",
    "wikipedia",
    "mediawiki",
    "module",
    "draft",
)

IMAGE_GEOMETRY = "480x480>"
IMAGE_QUALITY = 75

Compression = Literal["bz2", "gzip", "none"]

_DECOMPRESSORS = {
    "bz2": ("bzip2", "-dc"),
    "gzip": ("gzip", "-dc"),
    "none": ("cat",),
}


def _stage(name: str, prefix: Sequence[str], *args: str) -> PipelineStage:
    return PipelineStage(name=name, command=prefix[0], args=[*prefix[1:], *args])


def decompress_stage(compression: Compression) -> PipelineStage:
    return _stage("decompress", _DECOMPRESSORS[compression])


def extractor_stage(
    tools: ToolCommands, output_dir: Path, *, summary_only: bool
) -> PipelineStage:
    args = ["--output-dir", str(output_dir)]
    for category in EXCLUDED_CATEGORIES:
        args.extend(["--exclude", category])
    if summary_only:
        args.append("--summary-only")
    return _stage("extract", tools.extractor, *args)


def writer_stage(
    tools: ToolCommands, output_dir: Path, *, images: bool = False
) -> PipelineStage:
    args = ["--images"] if images else []
    args.extend(["--output-dir", str(output_dir)])
    return _stage("write", tools.writer, *args)


def annotator_stage(tools: ToolCommands, lexicon: Optional[Path]) -> PipelineStage:
    # Without a lexicon the annotator falls back to its built-in one.
    args = ["--lexicon", str(lexicon)] if lexicon else []
    return _stage("annotate", tools.annotator, *args)


def indexer_stage(tools: ToolCommands, output_dir: Path) -> PipelineStage:
    return _stage("index", tools.indexer, "--output-dir", str(output_dir))


def converter_stage(tools: ToolCommands, source: Path, target: Path) -> PipelineStage:
    return _stage(
        "convert",
        tools.converter,
        str(source),
        "-resize",
        IMAGE_GEOMETRY,
        "-quality",
        str(IMAGE_QUALITY),
        str(target),
    )
