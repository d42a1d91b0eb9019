"""Packaging: attach locale metadata and archive the sealed bundle."""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from . import console
from .bundle import BundlePaths
from .config import BuildConfig
from .executor import PipelineExecutor
from .models import PipelineStage
from .tools import METADATA_FILE

PRESET_EXTENSION = ".plist"


@dataclass(frozen=True)
class ArchiveSpec:
    """What to archive and whether to split it into fixed-size volumes."""

    bundle_dir: Path
    split_size: Optional[int] = None


def find_preset(preset_dir: Optional[Path], wiki_id: str) -> Optional[Path]:
    """Locate the locale metadata preset for ``wiki_id``, if any."""
    if preset_dir is None:
        return None
    preset = preset_dir / f"{wiki_id}{PRESET_EXTENSION}"
    return preset if preset.is_file() else None


def plan_archive_stages(spec: ArchiveSpec, paths: BundlePaths) -> List[PipelineStage]:
    """Stages creating the archive; split volumes stream straight from tar."""
    root = str(spec.bundle_dir.parent)
    member = spec.bundle_dir.name

    if spec.split_size is None:
        return [
            PipelineStage(
                name="tar",
                command="tar",
                args=["-cf", str(paths.archive_path), "-C", root, member],
            )
        ]

    return [
        PipelineStage(name="tar", command="tar", args=["-cf", "-", "-C", root, member]),
        PipelineStage(
            name="split",
            command="split",
            args=["-b", str(spec.split_size), "-d", "-a", "3", "-", paths.volume_prefix],
        ),
    ]


def _remove_stale_archives(paths: BundlePaths) -> None:
    paths.archive_path.unlink(missing_ok=True)
    for volume in paths.volumes():
        volume.unlink()


def create_archive(
    spec: ArchiveSpec, paths: BundlePaths, executor: PipelineExecutor
) -> List[Path]:
    """Archive the bundle directory.

    Returns:
        The archive file, or the split volumes in concatenation order

    Raises:
        StageFailure: If tar or split fails
    """
    _remove_stale_archives(paths)
    executor.run(plan_archive_stages(spec, paths))
    if spec.split_size is None:
        return [paths.archive_path]
    return paths.volumes()


def package_bundle(
    wiki_id: str,
    paths: BundlePaths,
    split_size: Optional[int],
    config: BuildConfig,
    executor: PipelineExecutor,
) -> List[Path]:
    """Attach the metadata preset and create the archive.

    Without a preset the bundle is still complete and usable, so archiving
    is skipped with a warning rather than failing the build.

    Returns:
        Created archive paths (empty when archiving was skipped)
    """
    _remove_stale_archives(paths)
    preset = find_preset(config.preset_dir, wiki_id)
    if preset is None:
        where = config.preset_dir or "(no preset directory configured)"
        console.warning(
            f"No metadata preset for {wiki_id} in {where}; skipping archive creation"
        )
        return []

    shutil.copyfile(preset, paths.bundle_dir / METADATA_FILE)
    console.info(f"Archiving {paths.bundle_dir.name}")
    return create_archive(
        ArchiveSpec(bundle_dir=paths.bundle_dir, split_size=split_size),
        paths,
        executor,
    )
