import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from beatstore.core.time import utcnow
from beatstore.models.base import Base


class Beat(Base):
    __tablename__ = "beats"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_beats_price_non_negative"),
        CheckConstraint("bpm > 0", name="ck_beats_bpm_positive"),
        Index("ix_beats_active_genre", "is_active", "genre"),
        Index("ix_beats_active_created", "is_active", "created_at"),
        Index("ix_beats_producer_active", "producer_id", "is_active"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    producer_id: Mapped[str] = mapped_column(ForeignKey("users.id"), index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    bpm: Mapped[int] = mapped_column(Integer)
    key: Mapped[str] = mapped_column(String(10))
    genre: Mapped[str] = mapped_column(String(50), index=True)
    mood: Mapped[str] = mapped_column(String(50), index=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # seconds
    play_count: Mapped[int] = mapped_column(Integer, default=0, index=True)
    like_count: Mapped[int] = mapped_column(Integer, default=0)
    is_exclusive: Mapped[bool] = mapped_column(Boolean, default=False)
    is_free: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    producer: Mapped["User"] = relationship("User", back_populates="beats")
    tag_rows: Mapped[list["BeatTag"]] = relationship(
        "BeatTag",
        back_populates="beat",
        cascade="all, delete-orphan",
        order_by="BeatTag.tag",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    @property
    def effective_price(self) -> Decimal:
        """Free beats are priced at zero regardless of the stored price."""
        return Decimal("0") if self.is_free else self.price


class BeatTag(Base):
    __tablename__ = "beat_tags"
    __table_args__ = (UniqueConstraint("beat_id", "tag", name="uq_beat_tags_beat_tag"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    beat_id: Mapped[str] = mapped_column(ForeignKey("beats.id", ondelete="CASCADE"), index=True)
    tag: Mapped[str] = mapped_column(String(50), index=True)  # stored lowercased

    beat: Mapped["Beat"] = relationship("Beat", back_populates="tag_rows")
