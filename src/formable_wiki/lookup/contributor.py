"""Discord contributor display-name lookup.

Contributor ids come from mentions in the original message. Display names
are fetched from the Discord REST API with a bot token; any failure falls
back to showing the raw id.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Final

import httpx

from formable_wiki.config import FormableWikiConfig, discord_bot_token, load_config
from formable_wiki.lookup.http import LookupUnavailableError, make_client, request_with_retry

# Discord snowflake ids are 17 to 20 digits
CONTRIBUTOR_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d{17,20}$")


class ContributorAuthError(LookupError):
    """Raised when no Discord bot token is configured."""

    pass


@dataclass(frozen=True)
class ContributorInfo:
    """Outcome of a contributor lookup.

    Attributes:
        contributor_id: The id that was looked up.
        display_name: Resolved name, or None when the lookup failed.
        error: Failure description, or None on success.
    """

    contributor_id: str
    display_name: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.display_name is not None

    @property
    def label(self) -> str:
        """Name to show: the display name, or the raw id as a fallback."""
        return self.display_name or self.contributor_id


class ContributorLookup:
    """Resolve Discord user ids to display names.

    Names and definitive misses (unknown user, malformed id) are cached per
    id for the lifetime of the instance; missing tokens and outages are not.

    Args:
        config: Project configuration (defaults to :func:`load_config`).
        client: httpx client for Discord API requests.
        token: Bot token; read from ``DISCORD_BOT_TOKEN`` when omitted.
        logger: Logger to use instead of the module logger.
    """

    def __init__(
        self,
        config: FormableWikiConfig | None = None,
        client: httpx.Client | None = None,
        *,
        token: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or load_config()
        self._client = client
        self._token = token
        self._logger = logger or logging.getLogger("formable_wiki.lookup")
        self._cache: dict[str, ContributorInfo] = {}

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = make_client(self.config)
        return self._client

    def _bot_token(self) -> str:
        token = self._token or discord_bot_token()
        if not token:
            raise ContributorAuthError("DISCORD_BOT_TOKEN not found. Set in .env file or environment.")
        return token

    def _fetch_name(self, contributor_id: str) -> str:
        """Fetch the display name for a valid id.

        Raises:
            ContributorAuthError: If no bot token is configured.
            LookupUnavailableError: If Discord stays unreachable.
            LookupError: If Discord rejects the id or returns no name.
        """
        url = f"{self.config.discord_api_base.rstrip('/')}/users/{contributor_id}"
        response = request_with_retry(
            self.client,
            "GET",
            url,
            headers={"Authorization": f"Bot {self._bot_token()}"},
            max_attempts=self.config.max_attempts,
            retry_delay=self.config.retry_delay,
            logger=self._logger,
        )
        if response.status_code == 404:
            raise LookupError(f"Unknown Discord user {contributor_id}")
        if response.status_code != 200:
            raise LookupError(f"Discord API returned HTTP {response.status_code}")

        try:
            user = response.json()
        except ValueError as e:
            raise LookupError("Failed to parse Discord API response") from e

        name = user.get("global_name") or user.get("username")
        if not name:
            raise LookupError(f"Discord user {contributor_id} has no name")
        return str(name)

    def lookup(self, contributor_id: str) -> ContributorInfo:
        """Look up one contributor; never raises."""
        contributor_id = contributor_id.strip()
        if contributor_id in self._cache:
            return self._cache[contributor_id]

        if not CONTRIBUTOR_ID_PATTERN.match(contributor_id):
            info = ContributorInfo(contributor_id, error="Not a Discord user id")
        else:
            try:
                info = ContributorInfo(contributor_id, display_name=self._fetch_name(contributor_id))
            except (ContributorAuthError, LookupUnavailableError) as e:
                self._logger.warning(f"Contributor lookup failed for {contributor_id}: {e}")
                # Token and network failures are retried on the next call
                return ContributorInfo(contributor_id, error=str(e))
            except LookupError as e:
                self._logger.info(f"Contributor {contributor_id} not resolved: {e}")
                info = ContributorInfo(contributor_id, error=str(e))

        self._cache[contributor_id] = info
        return info

    def display_name(self, contributor_id: str) -> str:
        """Return the display name, or the raw id when it cannot be resolved."""
        return self.lookup(contributor_id).label

    __call__ = display_name
