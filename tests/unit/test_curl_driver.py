"""Unit tests for curl driver (no network required)."""

from unittest.mock import Mock, patch

from xtbdict.drivers.curl import curl_stage, probe_url


def test_probe_url_is_header_only():
    """Test probe argv construction."""
    with patch("xtbdict.process_utils.subprocess.run") as mock_run:
        mock_run.return_value = Mock(
            returncode=0, stdout=b"HTTP/2 200\r\n", stderr=b""
        )

        result = probe_url("https://dumps.example.org/jawiki.xml.bz2")

        argv = mock_run.call_args[0][0]
        assert argv[0] == "curl"
        assert "-sS" in argv
        assert "-I" in argv
        assert "-f" in argv
        assert "-L" in argv
        assert argv[-1] == "https://dumps.example.org/jawiki.xml.bz2"
        assert result.ok


def test_probe_url_reports_failure():
    with patch("xtbdict.process_utils.subprocess.run") as mock_run:
        mock_run.return_value = Mock(
            returncode=22, stdout=b"", stderr=b"curl: (22) 404"
        )

        result = probe_url("https://dumps.example.org/missing")

        assert not result.ok
        assert result.stderr == b"curl: (22) 404"


def test_curl_stage_streams_to_stdout():
    stage = curl_stage("https://dumps.example.org/jawiki.xml.bz2")

    assert stage.name == "fetch"
    assert stage.command == "curl"
    assert "-I" not in stage.args
    assert "-o" not in stage.args
    assert stage.argv[-1] == "https://dumps.example.org/jawiki.xml.bz2"


def test_curl_stage_with_output_file(tmp_path):
    stage = curl_stage("https://dumps.example.org/images.zip", output=tmp_path / "images.zip")

    assert stage.args[stage.args.index("-o") + 1] == str(tmp_path / "images.zip")
    assert stage.argv[-1] == "https://dumps.example.org/images.zip"
