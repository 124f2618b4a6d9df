from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from beatstore.core.time import utcnow
from beatstore.models.base import Base


class SuggestionCategory(str, Enum):
    BEAT = "beat"
    PRODUCER = "producer"
    GENRE = "genre"
    TAG = "tag"
    BPM = "bpm"
    KEY = "key"


class SearchSuggestion(Base):
    __tablename__ = "search_suggestions"
    __table_args__ = (
        UniqueConstraint("query", "category", name="uq_search_suggestions_query_category"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    query: Mapped[str] = mapped_column(String(255), index=True)  # lowercased, trimmed
    category: Mapped[str] = mapped_column(
        String(20), default=SuggestionCategory.BEAT.value, index=True
    )
    popularity: Mapped[int] = mapped_column(Integer, default=1, index=True)
    result_count: Mapped[int] = mapped_column(Integer, default=0)
    last_used: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
