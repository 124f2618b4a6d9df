from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from beatstore.core.time import utcnow
from beatstore.models.base import Base


class SearchAnalytics(Base):
    __tablename__ = "search_analytics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)
    query: Mapped[str] = mapped_column(String(255), default="")
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    result_count: Mapped[int] = mapped_column(Integer, default=0)
    search_type: Mapped[str] = mapped_column(String(10))  # text/filter
    filters_json: Mapped[str] = mapped_column(Text)
    response_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
