"""xtbdict exceptions."""

from dataclasses import dataclass, field
from typing import List, Optional

from .models import StageResult


class BuildError(Exception):
    """Base class for every failure that aborts a dictionary build."""


class UsageRequested(BuildError):
    """Arguments did not match the command shape; show usage and exit cleanly."""


class SourceValidationError(BuildError):
    """Invocation arguments describe no buildable source."""


class AcquisitionError(BuildError):
    """The raw dump could not be located or fetched."""


class ImageConversionError(BuildError):
    """No image of a batch survived conversion."""


@dataclass
class StageFailure(BuildError):
    """An external stage exited with an unexpected status."""

    stage: str
    index: int
    exit_code: int
    stderr: Optional[str] = None
    results: List[StageResult] = field(default_factory=list)

    def __str__(self) -> str:
        msg = f"stage {self.index + 1} ({self.stage}) failed with exit code {self.exit_code}"
        if self.stderr:
            msg += f"\n  {self.stderr.strip()}"
        return msg
