from .base import ListingSource
from .feed import FeedSource, dedupe_listings, save_listings
from .portal import PortalSource

__all__ = [
    "ListingSource", "FeedSource", "PortalSource",
    "dedupe_listings", "save_listings",
]
