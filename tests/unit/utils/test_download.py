"""Unit tests for HTTP helpers."""

import io
from pathlib import Path
from unittest.mock import MagicMock, patch
from urllib.error import URLError

import pytest

from shellstrap.utils.download import download, latest_release_tag


class TestLatestReleaseTag:
    """Tests for latest_release_tag."""

    def test_returns_tag_name(self) -> None:
        with patch(
            "shellstrap.utils.download.fetch_json", return_value={"tag_name": " v0.45.0 "}
        ) as mock_fetch:
            assert latest_release_tag("jesseduffield/lazygit") == "v0.45.0"

        assert "repos/jesseduffield/lazygit/releases/latest" in mock_fetch.call_args.args[0]

    @pytest.mark.parametrize(
        "side_effect",
        [URLError("offline"), ValueError("bad json")],
    )
    def test_errors_return_none(self, side_effect: Exception) -> None:
        """Network or parse errors mean 'unknown'."""
        with patch("shellstrap.utils.download.fetch_json", side_effect=side_effect):
            assert latest_release_tag("a/b") is None

    def test_unexpected_payload(self) -> None:
        with patch("shellstrap.utils.download.fetch_json", return_value={"message": "rate"}):
            assert latest_release_tag("a/b") is None


class TestDownload:
    """Tests for download."""

    def test_writes_body(self, tmp_path: Path) -> None:
        response = MagicMock()
        response.__enter__.return_value = io.BytesIO(b"payload")
        with patch("shellstrap.utils.download.urlopen", return_value=response):
            path = download("https://example.com/f", tmp_path / "sub" / "f")

        assert path.read_bytes() == b"payload"

    def test_failure_removes_partial_file(self, tmp_path: Path) -> None:
        with (
            patch("shellstrap.utils.download.urlopen", side_effect=URLError("offline")),
            pytest.raises(URLError),
        ):
            download("https://example.com/f", tmp_path / "f")

        assert not (tmp_path / "f").exists()
