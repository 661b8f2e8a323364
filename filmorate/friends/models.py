from datetime import datetime
from enum import Enum

from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column

from filmorate.database import Base


class FriendStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"


class Friend(Base):
    """Направленное ребро user_id -> friend_id."""
    __tablename__ = "friends"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    friend_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[FriendStatus] = mapped_column(
        SQLEnum(FriendStatus, name="friendstatusenum"), default=FriendStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("user_id", "friend_id", name="uq_user_friend"),)
