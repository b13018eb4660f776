"""Modifier icon thumbnail lookup.

Custom modifiers reference their icon by a numeric asset id. The thumbnail
API turns that into an image URL, or reports why there is none.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Literal

import httpx

from formable_wiki.config import FormableWikiConfig, load_config
from formable_wiki.lookup.http import LookupUnavailableError, make_client, request_with_retry

ThumbnailStatus = Literal["ok", "not_found", "private_or_invalid", "unreachable"]
"""Outcome classes of a thumbnail lookup."""

# Entry states that mean the asset exists but cannot be shown
UNAVAILABLE_STATES: Final[frozenset[str]] = frozenset({"Blocked", "Error"})

THUMBNAIL_PARAMS: Final[dict[str, str]] = {
    "size": "420x420",
    "format": "Png",
    "isCircular": "false",
}


@dataclass(frozen=True)
class ThumbnailResult:
    """Result of a thumbnail lookup.

    Attributes:
        asset_id: The asset id that was looked up.
        status: Outcome class.
        image_url: Thumbnail URL when ``status == "ok"``.
        detail: Extra failure context (entry state, HTTP status, error text).
    """

    asset_id: str
    status: ThumbnailStatus
    image_url: str | None = None
    detail: str | None = None


def describe_thumbnail(result: ThumbnailResult) -> str:
    """Text shown to the user for a thumbnail lookup.

    Examples:
        >>> describe_thumbnail(ThumbnailResult("12", "not_found"))
        'No icon found for asset 12.'
    """
    if result.status == "ok":
        return f"Icon for asset {result.asset_id}: {result.image_url}"
    if result.status == "not_found":
        return f"No icon found for asset {result.asset_id}."
    if result.status == "private_or_invalid":
        return f"Asset {result.asset_id} is private, moderated or not a valid asset id."
    return f"Could not reach the thumbnail service for asset {result.asset_id}; try again later."


class ThumbnailLookup:
    """Resolve modifier icon asset ids to thumbnail URLs.

    Args:
        config: Project configuration (defaults to :func:`load_config`).
        client: httpx client for thumbnail API requests.
        logger: Logger to use instead of the module logger.
    """

    def __init__(
        self,
        config: FormableWikiConfig | None = None,
        client: httpx.Client | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or load_config()
        self._client = client
        self._logger = logger or logging.getLogger("formable_wiki.lookup")

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = make_client(self.config)
        return self._client

    def lookup(self, asset_id: str) -> ThumbnailResult:
        """Look up one asset id; never raises."""
        asset_id = asset_id.strip()
        if not asset_id.isdigit():
            return ThumbnailResult(asset_id, "private_or_invalid", detail="Asset id must be numeric")

        try:
            response = request_with_retry(
                self.client,
                "GET",
                self.config.thumbnail_api_url,
                params={"assetIds": asset_id, **THUMBNAIL_PARAMS},
                max_attempts=self.config.max_attempts,
                retry_delay=self.config.retry_delay,
                logger=self._logger,
            )
        except LookupUnavailableError as e:
            self._logger.warning(f"Thumbnail lookup unavailable for asset {asset_id}: {e}")
            return ThumbnailResult(asset_id, "unreachable", detail=str(e))

        if response.status_code != 200:
            return ThumbnailResult(asset_id, "private_or_invalid", detail=f"HTTP {response.status_code}")

        try:
            entries = response.json().get("data") or []
        except (ValueError, AttributeError):
            self._logger.warning(f"Thumbnail API returned an unexpected body for asset {asset_id}")
            return ThumbnailResult(asset_id, "unreachable", detail="Unexpected response body")

        entry = next((e for e in entries if str(e.get("targetId")) == asset_id), None)
        if entry is None and entries:
            entry = entries[0]
        if entry is None:
            return ThumbnailResult(asset_id, "not_found")

        state = entry.get("state")
        if state in UNAVAILABLE_STATES:
            return ThumbnailResult(asset_id, "private_or_invalid", detail=state)
        image_url = entry.get("imageUrl")
        if not image_url:
            return ThumbnailResult(asset_id, "not_found", detail=state)
        return ThumbnailResult(asset_id, "ok", image_url=image_url)
