from beatstore.schemas.search import (
    AutocompleteResult,
    BeatOut,
    SearchFacets,
    SearchRequest,
    SearchResult,
)

__all__ = [
    "AutocompleteResult",
    "BeatOut",
    "SearchFacets",
    "SearchRequest",
    "SearchResult",
]
