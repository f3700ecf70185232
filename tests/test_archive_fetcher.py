"""Tests for archive download and checksum verification."""

import hashlib
import os
from unittest.mock import MagicMock

import pytest
import requests

from repository.archive import ArchiveFetcher
from repository.errors import (
    ChecksumMismatchError,
    PluginNotFoundError,
    RepositoryConnectionError,
    RepositoryResponseError,
    VersionResolutionError,
)

BODY = b"PK\x03\x04 fake plugin archive contents"
SHA = hashlib.sha256(BODY).hexdigest()
URL = "https://grafana.com/api/plugins/test-panel/versions/1.0.0/download"


def _stream_response(status_code=200, chunks=(BODY[:10], BODY[10:])):
    res = MagicMock()
    res.status_code = status_code
    res.iter_content.return_value = iter(chunks)
    res.json.side_effect = ValueError("no json")
    return res


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def fetcher(session):
    return ArchiveFetcher(session=session, timeout=5)


class TestArchiveFetcher:
    """Tests for ArchiveFetcher.download."""

    def test_verified_download(self, fetcher, session):
        session.get.return_value = _stream_response()

        with fetcher.download(URL, SHA, "10.1.0") as archive:
            with open(archive.path, "rb") as fh:
                assert fh.read() == BODY
            assert archive.checksum == SHA
            assert archive.size == len(BODY)
            path = archive.path
        assert not os.path.exists(path)
        assert session.get.call_args.kwargs["stream"] is True

    def test_checksum_case_insensitive(self, fetcher, session):
        session.get.return_value = _stream_response()
        archive = fetcher.download(URL, SHA.upper(), "10.1.0")
        archive.cleanup()

    def test_mismatch_raises_and_removes_file(self, fetcher, session, tmp_path, monkeypatch):
        monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
        session.get.return_value = _stream_response()

        with pytest.raises(ChecksumMismatchError) as excinfo:
            fetcher.download(URL, "0" * 64, "10.1.0")

        assert excinfo.value.expected == "0" * 64
        assert excinfo.value.actual == SHA
        assert not isinstance(excinfo.value, VersionResolutionError)
        assert list(tmp_path.iterdir()) == []

    def test_empty_checksum_skips_verification(self, fetcher, session):
        session.get.return_value = _stream_response()
        with fetcher.download(URL, "", "10.1.0") as archive:
            assert archive.checksum == ""
            assert archive.size == len(BODY)

    def test_platform_override_sent_as_headers(self, fetcher, session):
        session.get.return_value = _stream_response()

        with fetcher.download(URL, SHA, "10.1.0", "windows-amd64"):
            pass

        headers = session.get.call_args.kwargs["headers"]
        assert headers["grafana-os"] == "windows"
        assert headers["grafana-arch"] == "amd64"
        assert headers["grafana-version"] == "10.1.0"

    def test_404(self, fetcher, session):
        res = _stream_response(404)
        session.get.return_value = res
        with pytest.raises(PluginNotFoundError):
            fetcher.download(URL, SHA, "10.1.0")
        res.close.assert_called_once()

    def test_server_error(self, fetcher, session):
        session.get.return_value = _stream_response(503)
        with pytest.raises(RepositoryResponseError) as excinfo:
            fetcher.download(URL, SHA, "10.1.0")
        assert excinfo.value.status_code == 503

    def test_interrupted_stream(self, fetcher, session, tmp_path, monkeypatch):
        monkeypatch.setattr("tempfile.tempdir", str(tmp_path))
        res = _stream_response()
        res.iter_content.side_effect = requests.ConnectionError("reset")
        session.get.return_value = res
        with pytest.raises(RepositoryConnectionError):
            fetcher.download(URL, SHA, "10.1.0")
        assert list(tmp_path.iterdir()) == []

    def test_move_to(self, fetcher, session, tmp_path):
        session.get.return_value = _stream_response()
        archive = fetcher.download(URL, SHA, "10.1.0")
        dest = tmp_path / "out" / "plugin.zip"
        archive.move_to(str(dest))
        assert dest.read_bytes() == BODY
        assert archive.path == str(dest)
