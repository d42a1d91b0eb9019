"""Post-processing for text bundles: reading annotation, then search index."""

from pathlib import Path

from . import console
from .bundle import remove_intermediates
from .config import BuildConfig
from .errors import BuildError
from .executor import PipelineExecutor
from .tools import ANNOTATED_TEXT, BASE_NAME_LIST, annotator_stage, indexer_stage


def run_post_processing(
    bundle_dir: Path, config: BuildConfig, executor: PipelineExecutor
) -> Path:
    """Annotate the base-name list and build the search index from it.

    Both stages must succeed before intermediates are deleted; on failure
    everything is left in place for inspection.

    Raises:
        StageFailure: If either stage fails
    """
    base_names = bundle_dir / BASE_NAME_LIST
    annotated = bundle_dir / ANNOTATED_TEXT

    if not base_names.is_file():
        raise BuildError(f"Extraction produced no {BASE_NAME_LIST} in {bundle_dir}")

    console.info("Annotating readings")
    executor.run_stage(
        annotator_stage(config.tools, config.lexicon),
        stdin=base_names,
        stdout=annotated,
    )

    console.info("Building search index")
    executor.run_stage(
        indexer_stage(config.tools, bundle_dir),
        stdin=annotated,
    )

    remove_intermediates(bundle_dir)
    return bundle_dir
