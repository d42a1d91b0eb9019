"""Pytest configuration and shared fixtures."""

import shlex
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from xtbdict.cli import cli
from xtbdict.config import BuildConfig, ToolCommands

DATA_DIR = Path(__file__).parent / "data"
TOOLS_DIR = DATA_DIR / "tools"


def tool(script: str) -> tuple:
    """Command prefix running a fixture tool with the current interpreter."""
    return (sys.executable, str(TOOLS_DIR / script))


FAKE_TOOLS = ToolCommands(
    extractor=tool("fake_extract.py"),
    writer=tool("fake_write.py"),
    annotator=tool("fake_annotate.py"),
    indexer=tool("fake_index.py"),
    converter=tool("fake_convert.py"),
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the operator's XTBDICT_* settings and presets out of tests."""
    for name in (
        "XTBDICT_OUTPUT_DIR",
        "XTBDICT_PRESET_DIR",
        "XTBDICT_MIRROR",
        "XTBDICT_LEXICON",
        "XTBDICT_EXTRACTOR",
        "XTBDICT_WRITER",
        "XTBDICT_ANNOTATOR",
        "XTBDICT_INDEXER",
        "XTBDICT_CONVERTER",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def fake_tools():
    return FAKE_TOOLS


@pytest.fixture
def failing_tool():
    """Command prefix of a stage that reads all input and exits 2."""
    return tool("fail_stage.py")


@pytest.fixture
def fake_tool_env(monkeypatch):
    """Point the CLI at the fixture tools through the environment."""
    for variable, prefix in (
        ("XTBDICT_EXTRACTOR", FAKE_TOOLS.extractor),
        ("XTBDICT_WRITER", FAKE_TOOLS.writer),
        ("XTBDICT_ANNOTATOR", FAKE_TOOLS.annotator),
        ("XTBDICT_INDEXER", FAKE_TOOLS.indexer),
        ("XTBDICT_CONVERTER", FAKE_TOOLS.converter),
    ):
        monkeypatch.setenv(variable, shlex.join(prefix))


@pytest.fixture
def output_dir(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    return out


@pytest.fixture
def preset_dir(tmp_path):
    """Preset directory holding metadata for ``testwiki`` only."""
    presets = tmp_path / "presets"
    presets.mkdir()
    (presets / "testwiki.plist").write_bytes((DATA_DIR / "testwiki.plist").read_bytes())
    return presets


@pytest.fixture
def build_config(output_dir):
    """Config wired to the fixture tools, without a preset directory."""
    return BuildConfig(output_dir=output_dir, tools=FAKE_TOOLS)


@pytest.fixture
def sample_xml():
    return DATA_DIR / "sample.xml"


@pytest.fixture
def cli_runner():
    """Provide Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def invoke(cli_runner):
    """Helper to invoke the CLI with args.

    Usage:
        result = invoke(["build", "federated", "jawiki", "20240101"])
    """

    def _invoke(args):
        return cli_runner.invoke(cli, args)

    return _invoke
