"""Pipeline stage and result models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class PipelineStage(BaseModel):
    """One external program invocation in a processing pipe."""

    model_config = ConfigDict(frozen=True)

    name: str
    command: str
    args: List[str] = Field(default_factory=list)
    expected_exit_code: int = 0

    @property
    def argv(self) -> List[str]:
        return [self.command, *self.args]


class StageResult(BaseModel):
    """Completion status of one stage of a run."""

    index: int
    name: str
    returncode: int
    stderr: str = ""


class Completed(BaseModel):
    """Result of a subprocess execution."""

    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0


__all__ = ["Completed", "PipelineStage", "StageResult"]
