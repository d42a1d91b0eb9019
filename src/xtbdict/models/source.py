"""Source descriptions: where a raw dump comes from.

A ``SourceSpec`` is built once from the invocation arguments and is never
mutated afterwards. Each variant carries only the fields meaningful to it.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

TEXT_BUNDLE_SUFFIX = "-text"
IMAGE_BUNDLE_SUFFIX = "-images"


class _Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    wiki_id: str
    date: str
    split_size: Optional[str] = None

    @property
    def name(self) -> str:
        """Base name shared by the bundle, its archive and its scratch space."""
        return f"{self.wiki_id}-{self.date}"


class FederatedDump(_Source):
    """Dump published on the federated mirror network."""

    kind: Literal["federated"] = "federated"
    mirrors: Tuple[str, ...]
    """Mirror roots in the order they are probed (primary first)."""


class SecondaryDump(_Source):
    """Dump hosted on the secondary mirror, either text or image bundle."""

    kind: Literal["secondary"] = "secondary"
    bundle: Literal["text", "image"]


class PackagedExport(_Source):
    """Pre-packaged export sharded by the first two characters of the wiki id."""

    kind: Literal["packaged-export"] = "packaged-export"


class LocalFile(_Source):
    """Dump already present on the local filesystem."""

    kind: Literal["local-file"] = "local-file"
    path: str
    compression: Literal["bz2", "gzip", "none"]


SourceSpec = Annotated[
    Union[FederatedDump, SecondaryDump, PackagedExport, LocalFile],
    Field(discriminator="kind"),
]


__all__ = [
    "FederatedDump",
    "IMAGE_BUNDLE_SUFFIX",
    "LocalFile",
    "PackagedExport",
    "SecondaryDump",
    "SourceSpec",
    "TEXT_BUNDLE_SUFFIX",
]
