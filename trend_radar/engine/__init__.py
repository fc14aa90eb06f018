"""Engine components wiring fetch → normalize → freshness → dedup."""

from .adapters import AggregatorAdapter, FieldAliases, ListingAdapter, SourceAdapter, build_adapters
from .coordinator import FetchCoordinator
from .dedup import DedupTracker
from .entity import CanonicalEntity
from .fetcher import FetchRequest, FetchResponse, Fetcher
from .freshness import keep_fresh

__all__ = [
    "AggregatorAdapter",
    "CanonicalEntity",
    "DedupTracker",
    "FetchCoordinator",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "FieldAliases",
    "ListingAdapter",
    "SourceAdapter",
    "build_adapters",
    "keep_fresh",
]
