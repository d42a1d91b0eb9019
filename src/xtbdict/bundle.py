"""On-disk layout of one dictionary build."""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from .tools import INTERMEDIATE_FILES

BUNDLE_EXTENSION = ".xtbdict"


@dataclass(frozen=True)
class BundlePaths:
    """Every path a build for one ``<wikiId>-<date>`` touches.

    Examples:
        root/jawiki-20240101.xtbdict/        bundle directory
        root/jawiki-20240101.work/           scratch space, removed on success
        root/jawiki-20240101.xtbdict.tar     unsplit archive
        root/jawiki-20240101.xtbdict.tar.000 first split volume
    """

    root: Path
    name: str

    @property
    def bundle_dir(self) -> Path:
        return self.root / f"{self.name}{BUNDLE_EXTENSION}"

    @property
    def work_dir(self) -> Path:
        return self.root / f"{self.name}.work"

    @property
    def stage_dir(self) -> Path:
        """Where the extractor and archive writer leave their output."""
        return self.work_dir / "out"

    @property
    def archive_path(self) -> Path:
        return self.root / f"{self.name}{BUNDLE_EXTENSION}.tar"

    @property
    def volume_prefix(self) -> str:
        return f"{self.archive_path}."

    def volumes(self) -> List[Path]:
        """Existing split volumes, in concatenation order."""
        pattern = f"{self.archive_path.name}.[0-9][0-9][0-9]*"
        return sorted(self.root.glob(pattern))


def reset_work_dir(paths: BundlePaths) -> None:
    """Start from an empty scratch directory; reruns overwrite, never append."""
    if paths.work_dir.exists():
        shutil.rmtree(paths.work_dir)
    paths.stage_dir.mkdir(parents=True)


def relocate_into_bundle(paths: BundlePaths) -> Path:
    """Move stage output into a freshly created bundle directory.

    Any bundle left by an earlier run is replaced. The scratch directory is
    removed afterwards.
    """
    if paths.bundle_dir.exists():
        shutil.rmtree(paths.bundle_dir)
    paths.bundle_dir.mkdir(parents=True)

    for item in sorted(paths.stage_dir.iterdir()):
        shutil.move(str(item), str(paths.bundle_dir / item.name))

    shutil.rmtree(paths.work_dir)
    return paths.bundle_dir


def remove_intermediates(
    bundle_dir: Path, names: Iterable[str] = INTERMEDIATE_FILES
) -> None:
    for name in names:
        (bundle_dir / name).unlink(missing_ok=True)
