"""Build orchestration: source → acquisition → extraction → packaging.

Runs are fail-fast. The first failure propagates as a BuildError and no
later stage runs. Intermediate files stay where they are for inspection.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, assert_never

from . import console
from .acquire import acquire
from .bundle import BundlePaths, reset_work_dir
from .config import BuildConfig
from .executor import PipelineExecutor
from .image_pipeline import run_image_extraction
from .models import (
    FederatedDump,
    LocalFile,
    PackagedExport,
    SecondaryDump,
    SourceSpec,
)
from .packager import package_bundle
from .postprocess import run_post_processing
from .resolver import parse_split_size
from .text_pipeline import run_text_extraction


@dataclass
class BuildResult:
    """Outcome of a successful build."""

    bundle_dir: Path
    archives: List[Path] = field(default_factory=list)


def bundle_paths(spec: SourceSpec, config: BuildConfig) -> BundlePaths:
    return BundlePaths(root=config.output_dir, name=spec.name)


def uses_image_path(spec: SourceSpec) -> bool:
    if isinstance(spec, SecondaryDump):
        return spec.bundle == "image"
    if isinstance(spec, (FederatedDump, PackagedExport, LocalFile)):
        return False
    assert_never(spec)


def build_dictionary(
    spec: SourceSpec,
    config: BuildConfig,
    executor: PipelineExecutor | None = None,
) -> BuildResult:
    """Build (and, if a preset exists, archive) the dictionary for ``spec``.

    Raises:
        AcquisitionError: If the dump cannot be located or fetched
        ImageConversionError: If an image batch converts nothing
        StageFailure: If any external stage fails
        BuildError: For any other build failure
    """
    executor = executor or PipelineExecutor(verbose=config.verbose)
    paths = bundle_paths(spec, config)

    # Probe before creating anything on disk.
    acquisition = acquire(spec, config)

    config.output_dir.mkdir(parents=True, exist_ok=True)
    reset_work_dir(paths)

    if uses_image_path(spec):
        bundle_dir = run_image_extraction(acquisition, paths, config, executor)
    else:
        bundle_dir = run_text_extraction(acquisition, paths, config, executor)
        run_post_processing(bundle_dir, config, executor)

    split_size = parse_split_size(spec.split_size) if spec.split_size else None
    archives = package_bundle(spec.wiki_id, paths, split_size, config, executor)

    console.info(f"Built {bundle_dir}")
    return BuildResult(bundle_dir=bundle_dir, archives=archives)
