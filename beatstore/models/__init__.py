from beatstore.models.base import Base
from beatstore.models.beat import Beat, BeatTag
from beatstore.models.search_analytics import SearchAnalytics
from beatstore.models.search_cache import SearchCache
from beatstore.models.search_suggestion import SearchSuggestion
from beatstore.models.user import User

__all__ = [
    "Base",
    "User",
    "Beat",
    "BeatTag",
    "SearchSuggestion",
    "SearchAnalytics",
    "SearchCache",
]
