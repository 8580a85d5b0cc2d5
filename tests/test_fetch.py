"""Tests for botstats.fetch."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from botstats.fetch import fetch_page, is_url, load_source_text, read_local
from botstats.util import FetchError, SourceError


def _ok(body: bytes = b"Bot,W\nA,1\n") -> MagicMock:
    return MagicMock(status_code=200, content=body)


class TestFetchPage:
    """Tests for fetch_page with mocked HTTP."""

    @patch("botstats.fetch.time.sleep")
    @patch("botstats.fetch.requests.get")
    def test_success_returns_text(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        mock_get.return_value = _ok()

        result = fetch_page("https://example.com/sample.csv")
        assert result == "Bot,W\nA,1\n"
        mock_get.assert_called_once()
        mock_sleep.assert_not_called()

    @patch("botstats.fetch.time.sleep")
    @patch("botstats.fetch.requests.get")
    def test_strips_bom(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        mock_get.return_value = _ok("\ufeffBot\nÜber\n".encode("utf-8"))
        assert fetch_page("https://example.com") == "Bot\nÜber\n"

    @patch("botstats.fetch.time.sleep")
    @patch("botstats.fetch.requests.get")
    def test_retries_on_500(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        mock_get.side_effect = [MagicMock(status_code=500), _ok()]

        result = fetch_page("https://example.com")
        assert result == "Bot,W\nA,1\n"
        assert mock_get.call_count == 2
        mock_sleep.assert_called_once()

    @patch("botstats.fetch.time.sleep")
    @patch("botstats.fetch.requests.get")
    def test_raises_after_max_retries(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        mock_get.return_value = MagicMock(status_code=404)

        with pytest.raises(FetchError, match="HTTP 404"):
            fetch_page("https://example.com")
        assert mock_get.call_count == 3

    @patch("botstats.fetch.time.sleep")
    @patch("botstats.fetch.requests.get")
    def test_retries_on_connection_error(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        import requests
        mock_get.side_effect = [requests.ConnectionError("refused"), _ok()]

        assert fetch_page("https://example.com") == "Bot,W\nA,1\n"
        assert mock_get.call_count == 2

    @patch("botstats.fetch.time.sleep")
    @patch("botstats.fetch.requests.get")
    def test_exponential_backoff(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        mock_get.return_value = MagicMock(status_code=500)

        with pytest.raises(FetchError):
            fetch_page("https://example.com")

        assert mock_sleep.call_count == 2
        mock_sleep.assert_any_call(1)
        mock_sleep.assert_any_call(2)

    @patch("botstats.fetch.time.sleep")
    @patch("botstats.fetch.requests.get")
    def test_non_utf8_body(self, mock_get: MagicMock, mock_sleep: MagicMock) -> None:
        mock_get.return_value = _ok(b"\xff\xfe\x00bad")
        with pytest.raises(FetchError, match="not UTF-8"):
            fetch_page("https://example.com")


class TestLoadSourceText:
    def test_is_url(self) -> None:
        assert is_url("https://example.com/a.csv")
        assert is_url("http://example.com/a.csv")
        assert not is_url("data/a.csv")

    def test_local_file(self, sample_csv_path: Path) -> None:
        text = load_source_text(sample_csv_path)
        assert text.startswith("Rank,Bot,")

    def test_local_file_as_string(self, sample_csv_path: Path) -> None:
        assert load_source_text(str(sample_csv_path)).startswith("Rank,Bot,")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SourceError, match="No such file"):
            read_local(tmp_path / "nope.csv")

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.csv"
        path.write_bytes(b"\xff\xfe\x00\xff")
        with pytest.raises(SourceError, match="Cannot read"):
            read_local(path)

    @patch("botstats.fetch.fetch_page", return_value="Bot\nA\n")
    def test_url_goes_to_fetch(self, mock_fetch: MagicMock) -> None:
        assert load_source_text("https://example.com/sample.csv") == "Bot\nA\n"
        mock_fetch.assert_called_once_with("https://example.com/sample.csv")
