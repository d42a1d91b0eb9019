"""Image bundles: fetch and flatten an image archive, resize, then write.

Conversion fans out over a thread pool sized to the processor count. Each
job runs one converter process and writes one uniquely named file, so
workers share nothing but the output directory. A failed conversion is
reported and skipped; the batch only fails when nothing converted.
"""

import os
import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from . import console
from .acquire import Acquisition, fetch_image_archive, flatten_zip
from .bundle import BundlePaths, relocate_into_bundle, remove_intermediates
from .config import BuildConfig, ToolCommands
from .errors import ImageConversionError
from .executor import PipelineExecutor
from .process_utils import run_with_validation
from .tools import converter_stage, writer_stage

IMAGE_LIST = "images.lst"


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one image."""

    source: Path
    target: Path
    ok: bool
    detail: str = ""


def plan_targets(sources: Sequence[Path], out_dir: Path) -> List[Tuple[Path, Path]]:
    """Assign every source a unique ``.jpg`` output path.

    ``a.png`` and ``a.gif`` would both become ``a.jpg``; later ones get a
    numeric suffix instead, skipping any name already issued.
    """
    counters: Dict[str, int] = {}
    issued: Set[str] = set()
    plan = []
    for source in sources:
        stem = source.stem or source.name
        name = f"{stem}.jpg"
        count = counters.get(stem, 0)
        while name in issued:
            count += 1
            name = f"{stem}-{count}.jpg"
        counters[stem] = count
        issued.add(name)
        plan.append((source, out_dir / name))
    return plan


def convert_image(tools: ToolCommands, source: Path, target: Path) -> ConversionResult:
    stage = converter_stage(tools, source, target)
    try:
        completed = run_with_validation(
            stage.argv,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError as e:
        return ConversionResult(source, target, False, str(e))

    if completed.returncode != stage.expected_exit_code:
        detail = completed.stderr.decode("utf-8", errors="replace").strip()
        return ConversionResult(
            source, target, False, detail or f"exit code {completed.returncode}"
        )
    if not target.is_file():
        return ConversionResult(source, target, False, "no output produced")
    return ConversionResult(source, target, True)


def convert_images(
    sources: Sequence[Path],
    out_dir: Path,
    tools: ToolCommands,
    max_workers: Optional[int] = None,
) -> List[ConversionResult]:
    """Convert every source image, collecting per-item results in input order."""
    out_dir.mkdir(parents=True, exist_ok=True)
    plan = plan_targets(sources, out_dir)
    workers = max_workers or os.cpu_count() or 1

    results: Dict[Path, ConversionResult] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {
            pool.submit(convert_image, tools, source, target): source
            for source, target in plan
        }
        for future in as_completed(futures):
            result = future.result()
            results[futures[future]] = result
    return [results[source] for source, _ in plan]


def run_image_extraction(
    acquisition: Acquisition,
    paths: BundlePaths,
    config: BuildConfig,
    executor: PipelineExecutor,
) -> Path:
    """Build an image bundle from a remote image archive.

    Returns:
        The sealed bundle directory

    Raises:
        AcquisitionError: If the archive cannot be fetched or holds no files
        ImageConversionError: If no image converted successfully
        StageFailure: If the archive writer fails
    """
    scratch = paths.work_dir
    archive = fetch_image_archive(acquisition.url, scratch, executor)
    images = flatten_zip(archive, scratch / "images")
    console.info(f"Converting {len(images)} images")

    results = convert_images(images, scratch / "resized", config.tools)
    for result in results:
        if not result.ok:
            console.warning(f"Conversion failed for {result.source.name}: {result.detail}")

    converted = [result.target for result in results if result.ok]
    if not converted:
        raise ImageConversionError(
            f"None of {len(results)} images converted; see warnings above"
        )
    console.status(f"Converted {len(converted)}/{len(results)} images", config.verbose)

    listing = scratch / IMAGE_LIST
    listing.write_text("".join(f"{path}\n" for path in converted), encoding="utf-8")
    executor.run_stage(
        writer_stage(config.tools, paths.stage_dir, images=True),
        stdin=listing,
    )

    bundle = relocate_into_bundle(paths)
    # The writer always emits a title list; it means nothing for images.
    remove_intermediates(bundle)
    return bundle
