"""External collaborators: continent, contributor and icon thumbnail lookups.

Every lookup degrades to a fallback value instead of raising, so a network
problem only ever affects the field it feeds.
"""

from formable_wiki.lookup.continent import CONTINENTS, ContinentLookup, static_continent
from formable_wiki.lookup.contributor import ContributorAuthError, ContributorInfo, ContributorLookup
from formable_wiki.lookup.http import LookupUnavailableError, request_with_retry
from formable_wiki.lookup.thumbnail import ThumbnailLookup, ThumbnailResult, describe_thumbnail

__all__ = [
    "CONTINENTS",
    "ContinentLookup",
    "ContributorAuthError",
    "ContributorInfo",
    "ContributorLookup",
    "LookupUnavailableError",
    "ThumbnailLookup",
    "ThumbnailResult",
    "describe_thumbnail",
    "request_with_retry",
    "static_continent",
]
