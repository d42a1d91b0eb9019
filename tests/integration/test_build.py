"""End-to-end builds against the fixture tools."""

import bz2
import shutil
import sys
import tarfile
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from xtbdict.builder import build_dictionary
from xtbdict.config import BuildConfig, ToolCommands
from xtbdict.errors import AcquisitionError, StageFailure
from xtbdict.models import Completed, FederatedDump, LocalFile, SecondaryDump

FINAL_ARTIFACTS = ["Articles.xtbdb", "Search.xtbindex", "Search.xtbmap"]


def _local(path, compression="none", split_size=None):
    return LocalFile(
        wiki_id="testwiki",
        date="20240101",
        path=str(path),
        compression=compression,
        split_size=split_size,
    )


def test_local_build_contains_only_final_artifacts(build_config, sample_xml, capsys):
    result = build_dictionary(_local(sample_xml), build_config)

    bundle = build_config.output_dir / "testwiki-20240101.xtbdict"
    assert result.bundle_dir == bundle
    assert sorted(p.name for p in bundle.iterdir()) == FINAL_ARTIFACTS
    assert result.archives == []
    assert "No metadata preset" in capsys.readouterr().err

    # Nothing else is left next to the bundle either
    assert sorted(p.name for p in build_config.output_dir.iterdir()) == [
        "testwiki-20240101.xtbdict"
    ]


def test_local_build_filters_and_annotates(build_config, sample_xml):
    build_dictionary(_local(sample_xml), build_config)

    bundle = build_config.output_dir / "testwiki-20240101.xtbdict"
    articles = (bundle / "Articles.xtbdb").read_text()
    index = (bundle / "Search.xtbindex").read_text().splitlines()

    assert "Apple\tsummary" in articles
    assert "Template:Infobox" not in articles
    assert index == [
        "Apple\tapple\tbuiltin",
        "Banana\tbanana\tbuiltin",
        "Cherry\tcherry\tbuiltin",
    ]


def test_full_articles_and_lexicon(tmp_path, build_config, sample_xml):
    lexicon = tmp_path / "lexicon.dic"
    lexicon.write_text("apple\tappuru\n")
    config = BuildConfig(
        output_dir=build_config.output_dir,
        tools=build_config.tools,
        lexicon=lexicon,
        summary_only=False,
    )

    build_dictionary(_local(sample_xml), config)

    bundle = config.output_dir / "testwiki-20240101.xtbdict"
    assert "Apple\tfull" in (bundle / "Articles.xtbdb").read_text()
    assert "lexicon" in (bundle / "Search.xtbindex").read_text()


@pytest.mark.skipif(shutil.which("bzip2") is None, reason="bzip2 is required")
def test_bz2_dump_is_decompressed_in_the_pipe(build_config, sample_xml, tmp_path):
    dump = tmp_path / "testwiki.xml.bz2"
    dump.write_bytes(bz2.compress(sample_xml.read_bytes()))

    build_dictionary(_local(dump, compression="bz2"), build_config)

    bundle = build_config.output_dir / "testwiki-20240101.xtbdict"
    assert "Banana" in (bundle / "Articles.xtbdb").read_text()


def test_failing_middle_stage_aborts_without_packaging(
    build_config, sample_xml, preset_dir, failing_tool
):
    config = BuildConfig(
        output_dir=build_config.output_dir,
        preset_dir=preset_dir,
        tools=ToolCommands(
            extractor=failing_tool,
            writer=build_config.tools.writer,
            annotator=build_config.tools.annotator,
            indexer=build_config.tools.indexer,
        ),
    )

    with pytest.raises(StageFailure) as excinfo:
        build_dictionary(_local(sample_xml), config)

    assert excinfo.value.stage == "extract"
    assert excinfo.value.exit_code == 2
    # The writer downstream of the crash exited 0 on empty input
    assert excinfo.value.results[-1].returncode == 0

    out = config.output_dir
    assert not (out / "testwiki-20240101.xtbdict").exists()
    assert not (out / "testwiki-20240101.xtbdict.tar").exists()
    # Scratch output is kept for diagnosis
    assert (out / "testwiki-20240101.work").is_dir()


def test_malformed_input_fails_in_extractor(build_config, tmp_path):
    dump = tmp_path / "broken.xml"
    dump.write_text("<html>not a dump</html>\n")

    with pytest.raises(StageFailure, match="extract"):
        build_dictionary(_local(dump), build_config)


def test_failing_post_processing_keeps_intermediates(tmp_path, build_config, sample_xml):
    config = BuildConfig(
        output_dir=build_config.output_dir,
        tools=build_config.tools,
        lexicon=tmp_path / "missing.dic",
    )

    with pytest.raises(StageFailure) as excinfo:
        build_dictionary(_local(sample_xml), config)

    assert excinfo.value.stage == "annotate"
    bundle = config.output_dir / "testwiki-20240101.xtbdict"
    assert (bundle / "BaseNames.txt").exists()
    assert (bundle / "Articles.rawdb").exists()


def test_preset_yields_archive(build_config, sample_xml, preset_dir):
    if shutil.which("tar") is None:
        pytest.skip("tar is required")
    config = BuildConfig(
        output_dir=build_config.output_dir, preset_dir=preset_dir, tools=build_config.tools
    )

    result = build_dictionary(_local(sample_xml), config)

    archive = config.output_dir / "testwiki-20240101.xtbdict.tar"
    assert result.archives == [archive]
    assert archive.stat().st_size > 0
    assert sorted(p.name for p in result.bundle_dir.iterdir()) == sorted(
        FINAL_ARTIFACTS + ["Info.plist"]
    )


def test_rerun_overwrites_previous_bundle(build_config, sample_xml):
    build_dictionary(_local(sample_xml), build_config)
    bundle = build_config.output_dir / "testwiki-20240101.xtbdict"
    (bundle / "stale.txt").write_text("left over")

    build_dictionary(_local(sample_xml), build_config)

    assert sorted(p.name for p in bundle.iterdir()) == FINAL_ARTIFACTS


def test_failed_probe_creates_nothing(tmp_path):
    config = BuildConfig(output_dir=tmp_path / "never-created")
    spec = FederatedDump(wiki_id="jawiki", date="20240101", mirrors=("https://a", "https://b"))

    with patch("xtbdict.acquire.probe_url") as probe:
        probe.return_value.ok = False
        probe.return_value.stderr = b"404"
        with pytest.raises(AcquisitionError):
            build_dictionary(spec, config)

    assert probe.call_count == 2
    assert not config.output_dir.exists()


def test_relative_tool_prefixes_resolve_from_caller_directory(
    monkeypatch, build_config, sample_xml
):
    tests_dir = Path(__file__).resolve().parent.parent
    monkeypatch.chdir(tests_dir)

    def relative(script):
        return (sys.executable, f"data/tools/{script}")

    config = BuildConfig(
        output_dir=build_config.output_dir,
        tools=ToolCommands(
            extractor=relative("fake_extract.py"),
            writer=relative("fake_write.py"),
            annotator=relative("fake_annotate.py"),
            indexer=relative("fake_index.py"),
        ),
    )

    result = build_dictionary(_local(sample_xml), config)

    assert sorted(p.name for p in result.bundle_dir.iterdir()) == FINAL_ARTIFACTS


@pytest.mark.skipif(shutil.which("tar") is None, reason="tar is required")
def test_secondary_image_bundle_skips_post_processing(tmp_path, build_config):
    archive = tmp_path / "commons.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("img/cat.png", b"cat")
        zf.writestr("img/dog.gif", b"dog")

    def fetch(url, scratch_dir, executor):
        target = scratch_dir / "images.zip"
        shutil.copyfile(archive, target)
        return target

    presets = tmp_path / "presets"
    presets.mkdir()
    (presets / "commons-images.plist").write_text("<plist/>")
    config = BuildConfig(
        output_dir=build_config.output_dir, preset_dir=presets, tools=build_config.tools
    )
    spec = SecondaryDump(wiki_id="commons-images", date="20240101", bundle="image")
    reachable = Completed(returncode=0, stdout=b"HTTP/1.1 200 OK\r\n", stderr=b"")

    with patch("xtbdict.acquire.probe_url", return_value=reachable), patch(
        "xtbdict.image_pipeline.fetch_image_archive", fetch
    ), patch("xtbdict.builder.run_post_processing") as post:
        result = build_dictionary(spec, config)

    post.assert_not_called()
    assert sorted(p.name for p in result.bundle_dir.iterdir()) == [
        "Articles.xtbdb",
        "Info.plist",
    ]
    archive_path = config.output_dir / "commons-images-20240101.xtbdict.tar"
    assert result.archives == [archive_path]
    with tarfile.open(archive_path) as tar:
        assert "commons-images-20240101.xtbdict/Articles.xtbdb" in tar.getnames()
