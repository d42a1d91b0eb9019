"""Source resolution: classify invocation arguments into a SourceSpec.

Classification is a pure function of its arguments. It performs no I/O, so
an unrecognized designator or a bad identifier always fails before anything
is probed, downloaded or created.
"""

import re
from typing import Optional, Sequence

from .config import ORIGIN_MIRROR, BuildConfig
from .errors import SourceValidationError, UsageRequested
from .models import (
    IMAGE_BUNDLE_SUFFIX,
    TEXT_BUNDLE_SUFFIX,
    FederatedDump,
    LocalFile,
    PackagedExport,
    SecondaryDump,
    SourceSpec,
)

USAGE = "xtbdict build <source> <wikiId> <date> [splitSize]"

REMOTE_DESIGNATORS = ("federated", "secondary", "packaged-export")

# Longest suffix first so ".xml.bz2" wins over ".bz2".
LOCAL_EXTENSIONS = (
    (".xml.bz2", "bz2"),
    (".xml.gz", "gzip"),
    (".bz2", "bz2"),
    (".gz", "gzip"),
    (".xml", "none"),
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_SPLIT_SIZE_RE = re.compile(r"^(\d+)([KMG]?)B?$", re.IGNORECASE)
_SIZE_UNITS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3}


def parse_split_size(value: str) -> int:
    """Convert a split size such as ``100M`` or ``650m`` to bytes.

    Raises:
        SourceValidationError: If the size is malformed or zero
    """
    match = _SPLIT_SIZE_RE.match(value.strip())
    if not match:
        raise SourceValidationError(
            f"Invalid split size: {value!r} (expected <digits>[K|M|G], e.g. 100M)"
        )
    size = int(match.group(1)) * _SIZE_UNITS[match.group(2).upper()]
    if size <= 0:
        raise SourceValidationError(f"Split size must be positive: {value!r}")
    return size


def _mirror_list(primary: str) -> tuple:
    mirrors = []
    for mirror in (primary.rstrip("/"), ORIGIN_MIRROR):
        if mirror not in mirrors:
            mirrors.append(mirror)
    return tuple(mirrors)


def _local_compression(designator: str) -> Optional[str]:
    lowered = designator.lower()
    for extension, compression in LOCAL_EXTENSIONS:
        if lowered.endswith(extension) and len(designator) > len(extension):
            return compression
    return None


def _check_identifier(label: str, value: str) -> None:
    if not _IDENTIFIER_RE.match(value):
        raise SourceValidationError(
            f"Invalid {label}: {value!r} (allowed characters: letters, digits, '_', '.', '-')"
        )


def resolve_source(
    designator: str,
    wiki_id: str,
    date: str,
    split_size: Optional[str],
    config: BuildConfig,
) -> SourceSpec:
    """Classify a source designator into one SourceSpec variant.

    Args:
        designator: ``federated``, ``secondary``, ``packaged-export`` or a
            local dump path ending in a recognized extension
        wiki_id: Wiki identifier (e.g. ``jawiki``)
        date: Dump date (e.g. ``20240101``)
        split_size: Optional volume size for the final archive
        config: Build configuration (supplies the primary mirror)

    Raises:
        SourceValidationError: For any unrecognized designator, malformed
            identifier or split size, or secondary-mirror naming violation
    """
    _check_identifier("wiki identifier", wiki_id)
    _check_identifier("date", date)
    if split_size is not None:
        parse_split_size(split_size)

    common = dict(wiki_id=wiki_id, date=date, split_size=split_size)

    if designator == "federated":
        return FederatedDump(mirrors=_mirror_list(config.mirror), **common)

    if designator == "secondary":
        if wiki_id.endswith(IMAGE_BUNDLE_SUFFIX):
            return SecondaryDump(bundle="image", **common)
        if wiki_id.endswith(TEXT_BUNDLE_SUFFIX):
            return SecondaryDump(bundle="text", **common)
        raise SourceValidationError(
            f"Secondary-mirror wiki identifier {wiki_id!r} must end in "
            f"{TEXT_BUNDLE_SUFFIX!r} (text bundle) or {IMAGE_BUNDLE_SUFFIX!r} (image bundle)"
        )

    if designator == "packaged-export":
        if len(wiki_id) < 2:
            raise SourceValidationError(
                f"Packaged-export wiki identifier {wiki_id!r} must be at least 2 characters"
            )
        return PackagedExport(**common)

    compression = _local_compression(designator)
    if compression is not None:
        return LocalFile(path=designator, compression=compression, **common)

    supported = ", ".join(REMOTE_DESIGNATORS)
    extensions = ", ".join(ext for ext, _ in LOCAL_EXTENSIONS)
    raise SourceValidationError(
        f"Unknown source: {designator!r} (supported: {supported}, "
        f"or a local dump file ending in {extensions})"
    )


def resolve_arguments(args: Sequence[str], config: BuildConfig) -> SourceSpec:
    """Validate positional arguments and resolve them into a SourceSpec.

    Raises:
        UsageRequested: If the argument count is not 3 or 4
        SourceValidationError: If the arguments describe no buildable source
    """
    if len(args) not in (3, 4):
        raise UsageRequested(USAGE)
    designator, wiki_id, date = args[:3]
    split_size = args[3] if len(args) == 4 else None
    return resolve_source(designator, wiki_id, date, split_size, config)
