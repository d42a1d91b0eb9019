"""Acquisition: locate the raw dump and turn it into a byte stream.

Remote sources are probed with a header-only request before anything is
created locally, so a missing dump never leaves a half-built bundle behind.
"""

import shutil
import stat
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, assert_never

from . import console
from .config import EXPORT_MIRROR, SECONDARY_MIRROR, BuildConfig
from .drivers.curl import curl_stage, probe_url
from .errors import AcquisitionError, StageFailure
from .executor import PipelineExecutor
from .models import (
    FederatedDump,
    LocalFile,
    PackagedExport,
    PipelineStage,
    SecondaryDump,
    SourceSpec,
)
from .tools import Compression

IMAGE_ARCHIVE = "images.zip"


@dataclass(frozen=True)
class Acquisition:
    """How to obtain the raw dump bytes for a run.

    ``stages`` write the dump to stdout; when empty, ``stdin`` names a local
    file that feeds the pipe directly.
    """

    stages: Tuple[PipelineStage, ...]
    compression: Optional[Compression]
    url: Optional[str] = None
    stdin: Optional[Path] = None


def federated_url(spec: FederatedDump, mirror: str) -> str:
    return f"{mirror}/{spec.wiki_id}/{spec.date}/{spec.name}-pages-articles.xml.bz2"


def secondary_url(spec: SecondaryDump) -> str:
    extension = "zip" if spec.bundle == "image" else "xml.bz2"
    return f"{SECONDARY_MIRROR}/{spec.wiki_id}/{spec.date}/{spec.name}.{extension}"


def packaged_export_url(spec: PackagedExport) -> str:
    shard = spec.wiki_id[:2]
    return f"{EXPORT_MIRROR}/{shard}/{spec.wiki_id}/{spec.name}.xml.bz2"


def _describe_probe_failure(url: str, stderr: bytes) -> str:
    detail = stderr.decode("utf-8", errors="replace").strip()
    return f"{url} ({detail})" if detail else url


def check_remote(url: str, verbose: bool) -> None:
    """Probe a single URL, raising AcquisitionError if it is unreachable."""
    result = probe_url(url)
    if not result.ok:
        raise AcquisitionError(
            f"Dump not available: {_describe_probe_failure(url, result.stderr)}"
        )
    console.status(f"Found {url}", verbose)


def select_mirror(spec: FederatedDump, verbose: bool) -> str:
    """Probe mirrors in order and return the URL of the first that answers.

    The returned URL is the one the full transfer must use.
    """
    tried = []
    for mirror in spec.mirrors:
        url = federated_url(spec, mirror)
        result = probe_url(url)
        if result.ok:
            console.status(f"Found {url}", verbose)
            return url
        console.status(f"Not available on {mirror}, trying next mirror", verbose)
        tried.append(_describe_probe_failure(url, result.stderr))
    raise AcquisitionError(
        "Dump not available on any mirror:\n  " + "\n  ".join(tried)
    )


def candidate_urls(spec: SourceSpec) -> List[str]:
    """URLs a remote source may be fetched from, in probe order."""
    if isinstance(spec, FederatedDump):
        return [federated_url(spec, mirror) for mirror in spec.mirrors]
    if isinstance(spec, SecondaryDump):
        return [secondary_url(spec)]
    if isinstance(spec, PackagedExport):
        return [packaged_export_url(spec)]
    if isinstance(spec, LocalFile):
        return []
    assert_never(spec)


def acquisition_for(spec: SourceSpec, url: Optional[str]) -> Acquisition:
    """Build the acquisition for ``spec`` once its URL is settled (no I/O)."""
    if isinstance(spec, LocalFile):
        return Acquisition(
            stages=(), compression=spec.compression, stdin=Path(spec.path)
        )
    if isinstance(spec, SecondaryDump) and spec.bundle == "image":
        # Image archives are downloaded whole, then unpacked.
        return Acquisition(stages=(), compression=None, url=url)
    return Acquisition(stages=(curl_stage(url),), compression="bz2", url=url)


def acquire(spec: SourceSpec, config: BuildConfig) -> Acquisition:
    """Resolve a SourceSpec into a concrete acquisition method.

    Raises:
        AcquisitionError: If the probe fails or the local file is missing
    """
    if isinstance(spec, FederatedDump):
        url = select_mirror(spec, config.verbose)
    elif isinstance(spec, (SecondaryDump, PackagedExport)):
        (url,) = candidate_urls(spec)
        check_remote(url, config.verbose)
    elif isinstance(spec, LocalFile):
        if not Path(spec.path).is_file():
            raise AcquisitionError(f"Dump file not found: {spec.path}")
        url = None
    else:
        assert_never(spec)
    return acquisition_for(spec, url)


def fetch_image_archive(url: str, scratch_dir: Path, executor: PipelineExecutor) -> Path:
    """Download an image archive into the scratch directory."""
    archive = scratch_dir / IMAGE_ARCHIVE
    try:
        executor.run_stage(curl_stage(url, output=archive))
    except StageFailure as e:
        raise AcquisitionError(f"Download failed: {url}\n  {e}") from e
    return archive


def _is_link(info: zipfile.ZipInfo) -> bool:
    mode = (info.external_attr >> 16) & 0xFFFF
    return stat.S_IFMT(mode) == stat.S_IFLNK


def flatten_zip(archive: Path, dest: Path) -> List[Path]:
    """Extract every regular file of a zip into ``dest`` without subdirectories.

    When two members share a base name the first one wins. Symbolic links
    are skipped.

    Raises:
        AcquisitionError: If the archive is unreadable or holds no files
    """
    dest.mkdir(parents=True, exist_ok=True)
    extracted: List[Path] = []
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                if _is_link(info):
                    console.warning(f"Skipping link in image archive: {info.filename}")
                    continue
                name = Path(info.filename.replace("\\", "/")).name
                if not name or name.startswith("."):
                    continue
                target = dest / name
                if target.exists():
                    console.warning(f"Skipping duplicate image name: {info.filename}")
                    continue
                with zf.open(info) as src, open(target, "wb") as out:
                    shutil.copyfileobj(src, out)
                extracted.append(target)
    except zipfile.BadZipFile as e:
        raise AcquisitionError(f"Cannot extract {archive}: {e}") from e

    if not extracted:
        raise AcquisitionError(f"No files extracted from {archive}")
    return extracted
