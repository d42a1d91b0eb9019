"""Pipeline execution engine.

Executes a linear chain of external stages connected with Unix pipes. A
pipe's own exit status only reflects its last process, so every stage is
waited on individually and the run fails if any of them failed.
"""

import subprocess
import tempfile
from contextlib import ExitStack
from pathlib import Path
from typing import IO, List, Optional, Sequence

from . import console
from .errors import StageFailure
from .models import PipelineStage, StageResult
from .process_utils import format_command, killed_by_sigpipe, popen_with_validation

STDERR_TAIL_BYTES = 4096


def _read_tail(stream: IO[bytes]) -> str:
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(max(0, size - STDERR_TAIL_BYTES))
    return stream.read().decode("utf-8", errors="replace")


def _kill(processes: List[subprocess.Popen]) -> None:
    for process in processes:
        if process.poll() is None:
            process.kill()
        process.wait()


def find_root_cause(
    stages: Sequence[PipelineStage], results: Sequence[StageResult]
) -> Optional[StageResult]:
    """Pick the stage to blame for a failed run.

    Upstream stages usually die of SIGPIPE once a downstream stage exits
    early, so a failure that is not a broken pipe is preferred. Returns None
    when every stage exited with its expected status.
    """
    failed = [
        result
        for stage, result in zip(stages, results)
        if result.returncode != stage.expected_exit_code
    ]
    if not failed:
        return None
    for result in failed:
        if not killed_by_sigpipe(result.returncode):
            return result
    return failed[0]


class PipelineExecutor:
    """Runs stage chains and checks the status of every stage."""

    def __init__(self, verbose: bool = False):
        """Initialize executor.

        Args:
            verbose: Print each stage command before it starts
        """
        self.verbose = verbose

    def run(
        self,
        stages: Sequence[PipelineStage],
        *,
        stdin: Optional[Path] = None,
        stdout: Optional[Path] = None,
    ) -> List[StageResult]:
        """Execute stages as one connected pipe.

        Args:
            stages: Stages in pipe order
            stdin: File fed to the first stage (default: /dev/null)
            stdout: File receiving the last stage's output (default: /dev/null)

        Returns:
            One StageResult per stage, in pipe order

        Raises:
            StageFailure: If any stage exits with an unexpected status or
                cannot be started
        """
        if not stages:
            raise ValueError("Pipeline has no stages")

        processes: List[subprocess.Popen] = []
        error_files: List[IO[bytes]] = []

        with ExitStack() as stack:
            source = (
                stack.enter_context(open(stdin, "rb"))
                if stdin is not None
                else subprocess.DEVNULL
            )
            sink = (
                stack.enter_context(open(stdout, "wb"))
                if stdout is not None
                else subprocess.DEVNULL
            )

            try:
                for i, stage in enumerate(stages):
                    is_first = i == 0
                    is_last = i == len(stages) - 1

                    stage_stdin = source if is_first else processes[-1].stdout
                    stage_stdout = sink if is_last else subprocess.PIPE
                    errors = stack.enter_context(tempfile.TemporaryFile())

                    console.status(
                        f"  Running [{i + 1}/{len(stages)}] {stage.name}: "
                        f"{format_command(stage.argv)}",
                        self.verbose,
                    )

                    try:
                        process = popen_with_validation(
                            stage.argv,
                            stdin=stage_stdin,
                            stdout=stage_stdout,
                            stderr=errors,
                        )
                    except OSError as e:
                        raise StageFailure(
                            stage=stage.name, index=i, exit_code=127, stderr=str(e)
                        ) from e

                    processes.append(process)
                    error_files.append(errors)

                    # Allow previous process to receive SIGPIPE
                    if i > 0 and processes[-2].stdout:
                        processes[-2].stdout.close()
            except Exception:
                for process in processes:
                    if process.stdout:
                        process.stdout.close()
                _kill(processes)
                raise

            for process in processes:
                process.wait()

            results = [
                StageResult(
                    index=i,
                    name=stage.name,
                    returncode=process.returncode,
                    stderr=_read_tail(errors),
                )
                for i, (stage, process, errors) in enumerate(
                    zip(stages, processes, error_files)
                )
            ]

        failure = find_root_cause(stages, results)
        if failure is not None:
            raise StageFailure(
                stage=failure.name,
                index=failure.index,
                exit_code=failure.returncode,
                stderr=failure.stderr,
                results=results,
            )
        return results

    def run_stage(
        self,
        stage: PipelineStage,
        *,
        stdin: Optional[Path] = None,
        stdout: Optional[Path] = None,
    ) -> StageResult:
        """Execute a single stage with the same status checking."""
        return self.run([stage], stdin=stdin, stdout=stdout)[0]
