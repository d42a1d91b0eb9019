"""Curl driver: HTTP transfers using the curl binary."""

import subprocess
from pathlib import Path
from typing import List, Optional

from ..models import Completed, PipelineStage
from ..process_utils import run_with_validation


def _curl_argv(
    url: str,
    *,
    head_only: bool = False,
    output: Optional[Path] = None,
    follow_redirects: bool = True,
    fail_on_error: bool = True,
) -> List[str]:
    argv = ["curl", "-sS"]  # -s silent, -S show errors

    # Fail on HTTP errors (4xx/5xx)
    if fail_on_error:
        argv.append("-f")

    # Follow redirects
    if follow_redirects:
        argv.append("-L")

    # Header-only request
    if head_only:
        argv.append("-I")

    if output is not None:
        argv.extend(["-o", str(output)])

    # URL (must be last positional arg)
    argv.append(url)
    return argv


def probe_url(url: str) -> Completed:
    """Issue a header-only request to check a remote resource exists.

    Returns:
        Completed with the response headers in stdout
    """
    result = run_with_validation(
        _curl_argv(url, head_only=True),
        stdin=subprocess.DEVNULL,
        capture_output=True,
        check=False,
    )

    return Completed(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )


def curl_stage(url: str, *, output: Optional[Path] = None) -> PipelineStage:
    """Build a transfer stage.

    Without ``output`` the body streams to stdout so the stage can head a
    pipe; curl naturally streams via pipes (O(1) memory).
    """
    argv = _curl_argv(url, output=output)
    return PipelineStage(name="fetch", command=argv[0], args=argv[1:])


__all__ = ["curl_stage", "probe_url"]
