"""
Unit tests for download module.

Tests fetching with mocked network requests.
"""

import pytest
import requests
import responses

from nativedep.core.download import (
    DownloadProgress,
    fetch_file,
    fetch_text,
    format_progress,
)
from nativedep.core.exceptions import DownloadFailed

URL = "https://storage.example.com/libdemo-nightly/libdemo-cpu-linux-x86_64.tar.gz"


class TestFetchText:
    """Test fetch_text()."""

    @responses.activate
    def test_success(self):
        """Test the body is returned as text."""
        responses.add(responses.GET, "https://example.com/listing", body="<xml/>")
        assert fetch_text("https://example.com/listing") == "<xml/>"

    @responses.activate
    def test_non_200(self):
        """Test any non-200 status raises DownloadFailed with the status."""
        responses.add(responses.GET, "https://example.com/listing", status=403)

        with pytest.raises(DownloadFailed) as exc_info:
            fetch_text("https://example.com/listing")

        assert exc_info.value.status_code == 403
        assert "https://example.com/listing" in str(exc_info.value)

    @responses.activate
    def test_connection_error(self):
        """Test transport failures raise DownloadFailed."""
        responses.add(
            responses.GET,
            "https://example.com/listing",
            body=requests.exceptions.ConnectionError("refused"),
        )
        with pytest.raises(DownloadFailed, match="Request failed"):
            fetch_text("https://example.com/listing")


class TestFetchFile:
    """Test fetch_file()."""

    @responses.activate
    def test_download(self, tmp_path):
        """Test a successful download writes the file."""
        responses.add(responses.GET, URL, body=b"archive bytes")
        destination = tmp_path / "libdemo-cpu-linux-x86_64.tar.gz"

        assert fetch_file(URL, destination) is True
        assert destination.read_bytes() == b"archive bytes"
        assert not (tmp_path / "libdemo-cpu-linux-x86_64.tar.gz.part").exists()

    @responses.activate
    def test_existing_file_skips_network(self, tmp_path):
        """Test an existing destination is never re-fetched or validated."""
        destination = tmp_path / "cached.tar.gz"
        destination.write_bytes(b"truncated")

        assert fetch_file(URL, destination) is False
        assert len(responses.calls) == 0
        assert destination.read_bytes() == b"truncated"

    @pytest.mark.parametrize("status", [404, 500, 204])
    @responses.activate
    def test_bad_status_leaves_no_file(self, tmp_path, status):
        """Test a non-200 status raises and leaves nothing behind."""
        responses.add(responses.GET, URL, status=status)
        destination = tmp_path / "archive.tar.gz"

        with pytest.raises(DownloadFailed) as exc_info:
            fetch_file(URL, destination)

        assert exc_info.value.status_code == status
        assert not destination.exists()
        assert list(tmp_path.iterdir()) == []

    @responses.activate
    def test_connection_error(self, tmp_path):
        """Test a transport failure raises DownloadFailed."""
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("reset")
        )
        with pytest.raises(DownloadFailed):
            fetch_file(URL, tmp_path / "archive.tar.gz")

        assert not (tmp_path / "archive.tar.gz").exists()

    @responses.activate
    def test_progress_callback(self, tmp_path):
        """Test the final progress report covers the whole body."""
        body = b"x" * 20000
        responses.add(
            responses.GET,
            URL,
            body=body,
            headers={"content-length": str(len(body))},
        )
        reports = []

        fetch_file(URL, tmp_path / "archive.tar.gz", progress_callback=reports.append)

        assert reports
        assert reports[-1].bytes_downloaded == len(body)
        assert reports[-1].percentage == 100.0

    @responses.activate
    def test_uses_session(self, tmp_path):
        """Test a provided session is used for the request."""
        responses.add(responses.GET, URL, body=b"data")
        with requests.Session() as session:
            assert fetch_file(URL, tmp_path / "a.tar.gz", session=session)
        assert len(responses.calls) == 1


class TestFormatProgress:
    """Test format_progress()."""

    def test_with_total(self):
        """Test output with a known total size."""
        progress = DownloadProgress(52428800, 104857600, 1048576)
        assert format_progress(progress) == "50.0/100.0 MB (50.0%) at 1.0 MB/s"

    def test_without_total(self):
        """Test output when the total size is unknown."""
        progress = DownloadProgress(1048576, 0, 0)
        assert progress.percentage == 0.0
        assert format_progress(progress) == "1.0 MB at 0.0 MB/s"
