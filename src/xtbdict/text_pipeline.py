"""Text extraction: dump bytes → decompress → extract → write, as one pipe."""

from pathlib import Path
from typing import List

from . import console
from .acquire import Acquisition
from .bundle import BundlePaths, relocate_into_bundle
from .config import BuildConfig
from .executor import PipelineExecutor
from .models import PipelineStage
from .tools import decompress_stage, extractor_stage, writer_stage


def plan_text_stages(
    acquisition: Acquisition, paths: BundlePaths, config: BuildConfig
) -> List[PipelineStage]:
    """Stages of the extraction pipe, in order."""
    return [
        *acquisition.stages,
        decompress_stage(acquisition.compression or "none"),
        extractor_stage(
            config.tools, paths.stage_dir, summary_only=config.summary_only
        ),
        writer_stage(config.tools, paths.stage_dir),
    ]


def run_text_extraction(
    acquisition: Acquisition,
    paths: BundlePaths,
    config: BuildConfig,
    executor: PipelineExecutor,
) -> Path:
    """Run the extraction pipe and move its output into the bundle directory.

    Data never touches disk between stages. Every stage's status is
    checked, so a crash in the decompressor or extractor fails the run even
    when the writer exits 0 on truncated input.

    Returns:
        The populated (not yet post-processed) bundle directory

    Raises:
        StageFailure: If any stage of the pipe fails; scratch output is kept
    """
    stages = plan_text_stages(acquisition, paths, config)
    console.info(f"Extracting {paths.name} ({len(stages)} stages)")
    executor.run(stages, stdin=acquisition.stdin)
    return relocate_into_bundle(paths)
