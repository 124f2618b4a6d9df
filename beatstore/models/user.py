import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from beatstore.core.time import utcnow
from beatstore.models.base import Base


class UserRole(str, Enum):
    PRODUCER = "producer"
    ARTIST = "artist"
    BOTH = "both"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.BOTH.value, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    beats: Mapped[list["Beat"]] = relationship("Beat", back_populates="producer")

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.username
