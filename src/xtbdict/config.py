"""Build configuration resolved once at the CLI edge.

Pipeline code never reads the process environment; it receives a
``BuildConfig`` value and passes it down explicitly.
"""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

DEFAULT_MIRROR = "https://ftp.acc.umu.se/mirror/wikimedia.org/dumps"
ORIGIN_MIRROR = "https://dumps.wikimedia.org"
SECONDARY_MIRROR = "https://dumps.xtbook.org/secondary"
EXPORT_MIRROR = "https://dumps.xtbook.org/export"


@dataclass(frozen=True)
class ToolCommands:
    """Command prefixes of the external tools a build drives."""

    extractor: Tuple[str, ...] = ("xtbwiki-extract",)
    writer: Tuple[str, ...] = ("xtbwiki-write",)
    annotator: Tuple[str, ...] = ("xtbwiki-yomi",)
    indexer: Tuple[str, ...] = ("xtbwiki-index",)
    converter: Tuple[str, ...] = ("convert",)


@dataclass(frozen=True)
class BuildConfig:
    """Immutable settings threaded through every pipeline component."""

    output_dir: Path
    preset_dir: Optional[Path] = None
    mirror: str = DEFAULT_MIRROR
    lexicon: Optional[Path] = None
    tools: ToolCommands = field(default_factory=ToolCommands)
    summary_only: bool = True
    verbose: bool = False


_TOOL_VARIABLES = {
    "extractor": "XTBDICT_EXTRACTOR",
    "writer": "XTBDICT_WRITER",
    "annotator": "XTBDICT_ANNOTATOR",
    "indexer": "XTBDICT_INDEXER",
    "converter": "XTBDICT_CONVERTER",
}


def _user_preset_dir() -> Path:
    """Return the user global preset directory (~/.local/xtbdict/presets)."""
    return Path.home() / ".local" / "xtbdict" / "presets"


def _resolve_tools(environ: Mapping[str, str]) -> ToolCommands:
    overrides = {}
    for attr, variable in _TOOL_VARIABLES.items():
        value = environ.get(variable)
        if value:
            overrides[attr] = tuple(shlex.split(value))
    return ToolCommands(**overrides)


def resolve_config(
    output_dir: Optional[str] = None,
    preset_dir: Optional[str] = None,
    mirror: Optional[str] = None,
    lexicon: Optional[str] = None,
    *,
    summary_only: bool = True,
    verbose: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> BuildConfig:
    """Resolve the build configuration.

    Resolution order for each setting:
    1. CLI option (explicit override)
    2. $XTBDICT_* environment variable
    3. Built-in default

    The preset directory defaults to ~/.local/xtbdict/presets only when it
    exists; otherwise no preset directory is configured and packaging is
    skipped with a warning.

    Args:
        output_dir: Value of --output-dir if provided
        preset_dir: Value of --preset-dir if provided
        mirror: Value of --mirror if provided
        lexicon: Value of --lexicon if provided
        summary_only: Extract article summaries only
        verbose: Print stage commands and probe results
        environ: Environment mapping (default: os.environ)

    Returns:
        BuildConfig ready to hand to the builder
    """
    env = os.environ if environ is None else environ

    out = output_dir or env.get("XTBDICT_OUTPUT_DIR") or os.getcwd()

    presets = preset_dir or env.get("XTBDICT_PRESET_DIR")
    if presets:
        resolved_presets: Optional[Path] = Path(presets)
    elif _user_preset_dir().is_dir():
        resolved_presets = _user_preset_dir()
    else:
        resolved_presets = None

    lex = lexicon or env.get("XTBDICT_LEXICON")

    return BuildConfig(
        output_dir=Path(out).resolve(),
        preset_dir=resolved_presets,
        mirror=(mirror or env.get("XTBDICT_MIRROR") or DEFAULT_MIRROR).rstrip("/"),
        lexicon=Path(lex).resolve() if lex else None,
        tools=_resolve_tools(env),
        summary_only=summary_only,
        verbose=verbose,
    )
