"""Unit tests for modifier icon thumbnail lookups."""

from unittest.mock import patch

import httpx
import pytest

from formable_wiki.config import FormableWikiConfig
from formable_wiki.lookup.thumbnail import ThumbnailLookup, ThumbnailResult, describe_thumbnail

ASSET_ID = "55443322"
IMAGE_URL = "https://tr.rbxcdn.com/abc/420/420/Image/Png"


def _entries(*entries: dict) -> httpx.Response:
    return httpx.Response(200, json={"data": list(entries)})


def _unexpected(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected request to {request.url}")


class TestThumbnailLookup:
    """Tests for ThumbnailLookup.lookup()."""

    @pytest.mark.unit
    def test_image_found(self, test_config: FormableWikiConfig, mock_client) -> None:
        """Should return the image URL and send the thumbnail parameters."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _entries({"targetId": int(ASSET_ID), "state": "Completed", "imageUrl": IMAGE_URL})

        result = ThumbnailLookup(test_config, mock_client(handler)).lookup(ASSET_ID)

        assert result == ThumbnailResult(ASSET_ID, "ok", image_url=IMAGE_URL)
        params = seen[0].url.params
        assert params["assetIds"] == ASSET_ID
        assert params["size"] == "420x420"
        assert params["format"] == "Png"

    @pytest.mark.unit
    def test_no_entry(self, test_config: FormableWikiConfig, mock_client) -> None:
        """Should report not_found when the API lists nothing."""
        result = ThumbnailLookup(test_config, mock_client(lambda request: _entries())).lookup(ASSET_ID)
        assert result.status == "not_found"

    @pytest.mark.unit
    def test_pending_without_url(self, test_config: FormableWikiConfig, mock_client) -> None:
        """Should report not_found when the entry has no image URL."""
        client = mock_client(lambda request: _entries({"targetId": int(ASSET_ID), "state": "Pending", "imageUrl": None}))
        result = ThumbnailLookup(test_config, client).lookup(ASSET_ID)
        assert result.status == "not_found"

    @pytest.mark.unit
    @pytest.mark.parametrize("state", ["Blocked", "Error"])
    def test_blocked_asset(self, test_config: FormableWikiConfig, mock_client, state: str) -> None:
        """Should report private_or_invalid for blocked or failed assets."""
        client = mock_client(lambda request: _entries({"targetId": int(ASSET_ID), "state": state, "imageUrl": ""}))
        result = ThumbnailLookup(test_config, client).lookup(ASSET_ID)

        assert result.status == "private_or_invalid"
        assert result.detail == state

    @pytest.mark.unit
    def test_non_numeric_id(self, test_config: FormableWikiConfig, mock_client) -> None:
        """Should reject non-numeric ids without calling the API."""
        result = ThumbnailLookup(test_config, mock_client(_unexpected)).lookup("rbxassetid://12")
        assert result.status == "private_or_invalid"

    @pytest.mark.unit
    def test_bad_request(self, test_config: FormableWikiConfig, mock_client) -> None:
        """Should treat a 400 as an invalid asset."""
        result = ThumbnailLookup(test_config, mock_client(lambda request: httpx.Response(400))).lookup(ASSET_ID)
        assert result.status == "private_or_invalid"
        assert result.detail == "HTTP 400"

    @pytest.mark.unit
    def test_unreachable(self, test_config: FormableWikiConfig, mock_client) -> None:
        """Should report unreachable after transport errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out")

        with patch("formable_wiki.lookup.http.time.sleep"):
            result = ThumbnailLookup(test_config, mock_client(handler)).lookup(ASSET_ID)

        assert result.status == "unreachable"

    @pytest.mark.unit
    def test_unexpected_body(self, test_config: FormableWikiConfig, mock_client) -> None:
        """Should report unreachable for a body that is not the expected JSON."""
        client = mock_client(lambda request: httpx.Response(200, text="maintenance"))
        assert ThumbnailLookup(test_config, client).lookup(ASSET_ID).status == "unreachable"


class TestDescribeThumbnail:
    """Tests for describe_thumbnail()."""

    @pytest.mark.unit
    def test_messages(self) -> None:
        """Should explain each outcome."""
        assert describe_thumbnail(ThumbnailResult("1", "ok", image_url=IMAGE_URL)) == f"Icon for asset 1: {IMAGE_URL}"
        assert describe_thumbnail(ThumbnailResult("1", "not_found")) == "No icon found for asset 1."
        assert "private" in describe_thumbnail(ThumbnailResult("1", "private_or_invalid"))
        assert "try again later" in describe_thumbnail(ThumbnailResult("1", "unreachable"))
