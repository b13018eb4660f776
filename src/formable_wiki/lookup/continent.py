"""Country to continent lookup.

A built-in table covers the countries that show up in practice; unknown
names are optionally resolved through the REST Countries API.
"""

from __future__ import annotations

import logging
from typing import Final

import httpx

from formable_wiki.config import FormableWikiConfig, load_config
from formable_wiki.lookup.http import LookupUnavailableError, make_client, request_with_retry

# Continents in tie-break order
CONTINENTS: Final[tuple[str, ...]] = (
    "North America",
    "South America",
    "Europe",
    "Africa",
    "Asia",
    "Oceania",
)

_CONTINENT_MEMBERS: Final[dict[str, tuple[str, ...]]] = {
    "North America": (
        "United States", "USA", "Canada", "Mexico", "Cuba", "Haiti", "Dominican Republic",
        "Jamaica", "Guatemala", "Honduras", "El Salvador", "Nicaragua", "Costa Rica",
        "Panama", "Bahamas", "Belize", "Greenland",
    ),
    "South America": (
        "Brazil", "Argentina", "Chile", "Colombia", "Peru", "Venezuela", "Ecuador",
        "Bolivia", "Paraguay", "Uruguay", "Guyana", "Suriname", "French Guiana",
    ),
    "Europe": (
        "Russia", "United Kingdom", "UK", "France", "Germany", "Italy", "Spain", "Poland",
        "Ukraine", "Romania", "Netherlands", "Belgium", "Greece", "Czechia",
        "Czech Republic", "Portugal", "Sweden", "Hungary", "Belarus", "Austria", "Serbia",
        "Switzerland", "Bulgaria", "Denmark", "Finland", "Slovakia", "Norway", "Ireland",
        "Croatia", "Moldova", "Bosnia", "Bosnia and Herzegovina", "Albania", "Lithuania",
        "Slovenia", "Latvia", "Estonia", "Montenegro", "Luxembourg", "Malta", "Iceland",
        "Andorra", "Monaco", "Liechtenstein", "San Marino", "Vatican", "Vatican City",
        "North Macedonia", "Kosovo",
    ),
    "Africa": (
        "Nigeria", "Ethiopia", "Egypt", "DR Congo", "Tanzania", "South Africa", "Kenya",
        "Uganda", "Algeria", "Sudan", "Morocco", "Angola", "Mozambique", "Ghana",
        "Madagascar", "Cameroon", "Ivory Coast", "Niger", "Burkina Faso", "Mali",
        "Malawi", "Zambia", "Senegal", "Chad", "Somalia", "Zimbabwe", "Guinea", "Rwanda",
        "Benin", "Burundi", "Tunisia", "South Sudan", "Togo", "Sierra Leone", "Libya",
        "Congo", "Liberia", "Central African Republic", "Mauritania", "Eritrea",
        "Namibia", "Gambia", "Botswana", "Gabon", "Lesotho", "Guinea-Bissau",
        "Equatorial Guinea", "Mauritius", "Eswatini", "Djibouti", "Comoros",
        "Cape Verde", "São Tomé and Príncipe", "Seychelles",
    ),
    "Asia": (
        "China", "India", "Indonesia", "Pakistan", "Bangladesh", "Japan", "Philippines",
        "Vietnam", "Turkey", "Iran", "Thailand", "Myanmar", "South Korea", "Iraq",
        "Afghanistan", "Saudi Arabia", "Uzbekistan", "Malaysia", "Yemen", "Nepal",
        "North Korea", "Sri Lanka", "Kazakhstan", "Syria", "Cambodia", "Jordan",
        "Azerbaijan", "United Arab Emirates", "UAE", "Tajikistan", "Israel", "Laos",
        "Lebanon", "Kyrgyzstan", "Turkmenistan", "Singapore", "Oman", "Palestine",
        "Kuwait", "Georgia", "Mongolia", "Armenia", "Qatar", "Bahrain", "Timor-Leste",
        "East Timor", "Cyprus", "Bhutan", "Maldives", "Brunei", "Taiwan",
    ),
    "Oceania": (
        "Australia", "Papua New Guinea", "New Zealand", "Fiji", "Solomon Islands",
        "Vanuatu", "Samoa", "Kiribati", "Micronesia", "Tonga", "Marshall Islands",
        "Palau", "Tuvalu", "Nauru",
    ),
}  # fmt: skip

# Case-folded country name -> continent
COUNTRY_CONTINENTS: Final[dict[str, str]] = {
    country.casefold(): continent
    for continent, members in _CONTINENT_MEMBERS.items()
    for country in members
}


def static_continent(country: str) -> str | None:
    """Look a country up in the built-in table (case-insensitive).

    Examples:
        >>> static_continent("Ukraine")
        'Europe'
        >>> static_continent("usa")
        'North America'
        >>> static_continent("Atlantis")
    """
    return COUNTRY_CONTINENTS.get(country.strip().casefold())


class ContinentLookup:
    """Resolve a single country name to a continent label.

    Results, misses included, are cached for the lifetime of the instance,
    keyed by the exact country string. Failures to reach the API are not.

    Args:
        config: Project configuration (defaults to :func:`load_config`).
        client: httpx client for REST Countries requests.
        remote: Override ``config.remote_continent_lookup``.
        logger: Logger to use instead of the module logger.
    """

    def __init__(
        self,
        config: FormableWikiConfig | None = None,
        client: httpx.Client | None = None,
        *,
        remote: bool | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or load_config()
        self.remote = self.config.remote_continent_lookup if remote is None else remote
        self._client = client
        self._logger = logger or logging.getLogger("formable_wiki.lookup")
        self._cache: dict[str, str | None] = {}

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = make_client(self.config)
        return self._client

    def lookup(self, country: str) -> str | None:
        """Return the continent of ``country``, or None when unknown.

        A None caused by an unreachable API is not cached, so the next call
        for the same country tries again.
        """
        if country in self._cache:
            return self._cache[country]

        continent = static_continent(country)
        if continent is None and self.remote and country.strip():
            try:
                continent = self._remote_lookup(country.strip())
            except LookupUnavailableError as e:
                self._logger.warning(f"Continent lookup unavailable for '{country}': {e}")
                return None

        self._cache[country] = continent
        return continent

    __call__ = lookup

    def _remote_lookup(self, country: str) -> str | None:
        """Query REST Countries for one name.

        Raises:
            LookupUnavailableError: If the API stays unreachable or answers
                with something other than JSON.
        """
        url = f"{self.config.continent_api_url.rstrip('/')}/{country}"
        response = request_with_retry(
            self.client,
            "GET",
            url,
            params={"fullText": "true", "fields": "continents"},
            max_attempts=self.config.max_attempts,
            retry_delay=self.config.retry_delay,
            logger=self._logger,
        )

        if response.status_code != 200:
            self._logger.debug(f"No continent for '{country}' (HTTP {response.status_code})")
            return None

        try:
            payload = response.json()
        except ValueError as e:
            raise LookupUnavailableError(f"GET {url} returned invalid JSON") from e

        entries = payload if isinstance(payload, list) else [payload]
        for entry in entries:
            continents = entry.get("continents") if isinstance(entry, dict) else None
            if continents:
                return str(continents[0])
        return None
