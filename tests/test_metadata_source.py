"""Tests for the plugin metadata source."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from repository.errors import (
    MetadataParseError,
    PluginNotFoundError,
    RepositoryConnectionError,
    RepositoryResponseError,
)
from repository.metadata import MetadataSource


def _response(status_code=200, data=None, text=None):
    res = MagicMock()
    res.status_code = status_code
    res.text = text if text is not None else json.dumps(data)
    res.json.side_effect = lambda: json.loads(res.text)
    return res


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def source(session):
    return MetadataSource("https://example.com/api/plugins/", session=session, timeout=5)


class TestFetchPluginMetadata:
    """Tests for MetadataSource.fetch_plugin_metadata."""

    @patch("repository.metadata.os_and_arch_string", return_value="linux-amd64")
    def test_fetches_and_parses(self, _platform, source, session):
        session.get.return_value = _response(data={
            "id": "test-panel",
            "versions": [{"version": "1.0.0", "arch": {"any": {"sha256": "abc"}}}],
        })

        catalog = source.fetch_plugin_metadata("test-panel", "10.1.0")

        assert catalog.id == "test-panel"
        assert catalog.versions[0].platform_checksums == {"any": "abc"}
        args, kwargs = session.get.call_args
        assert args[0] == "https://example.com/api/plugins/repo/test-panel"
        assert kwargs["timeout"] == 5
        assert kwargs["headers"] == {
            "grafana-version": "10.1.0",
            "grafana-os": "linux",
            "grafana-arch": "amd64",
            "User-Agent": "grafana 10.1.0",
        }

    def test_platform_override_sent_as_headers(self, source, session):
        session.get.return_value = _response(data={"id": "test-panel", "versions": []})

        source.fetch_plugin_metadata("test-panel", "10.1.0", "darwin-arm64")

        headers = session.get.call_args.kwargs["headers"]
        assert headers["grafana-os"] == "darwin"
        assert headers["grafana-arch"] == "arm64"

    def test_404_raises_not_found(self, source, session):
        session.get.return_value = _response(404, data={"message": "Plugin not found"})
        with pytest.raises(PluginNotFoundError):
            source.fetch_plugin_metadata("missing", "10.1.0")

    def test_non_2xx_raises_response_error(self, source, session):
        session.get.return_value = _response(500, data={"message": "boom"})
        with pytest.raises(RepositoryResponseError) as excinfo:
            source.fetch_plugin_metadata("test-panel", "10.1.0")
        assert excinfo.value.status_code == 500
        assert excinfo.value.message == "boom"

    def test_non_json_error_body(self, source, session):
        session.get.return_value = _response(502, text="<html>bad gateway</html>")
        with pytest.raises(RepositoryResponseError) as excinfo:
            source.fetch_plugin_metadata("test-panel", "10.1.0")
        assert excinfo.value.message == ""

    def test_invalid_json_raises_parse_error(self, source, session):
        session.get.return_value = _response(200, text="not json")
        with pytest.raises(MetadataParseError):
            source.fetch_plugin_metadata("test-panel", "10.1.0")

    def test_timeout_raises_connection_error(self, source, session):
        session.get.side_effect = requests.Timeout("slow")
        with pytest.raises(RepositoryConnectionError):
            source.fetch_plugin_metadata("test-panel", "10.1.0")

    def test_connection_error_propagates(self, source, session):
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(RepositoryConnectionError) as excinfo:
            source.fetch_plugin_metadata("test-panel", "10.1.0")
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)

    def test_tls_verification_flag(self, session):
        MetadataSource("https://example.com", session=session, verify_tls=False)
        assert session.verify is False
