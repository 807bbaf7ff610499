# models/like.py
from sqlalchemy import Column, BigInteger, DateTime, Enum, ForeignKey, Index, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from core.kinds import LIKE_TARGET_KINDS
from .base import Base


class Like(Base):
    """Факт «пользователь лайкнул цель». Наличие строки и есть лайк."""

    __tablename__ = "likes"

    id = Column(BigInteger, primary_key=True)
    liked_by_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    # полиморфная ссылка: video / comment / tweet, без FK
    target_id = Column(BigInteger, nullable=False)
    target_kind = Column(
        Enum(*LIKE_TARGET_KINDS, name="like_target_kind"),
        nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "liked_by_id",
            "target_id",
            "target_kind",
            name="uq_like_actor_target_kind"
        ),
        Index("ix_likes_target", "target_kind", "target_id"),
    )

    liked_by = relationship("User", foreign_keys=[liked_by_id])

    def __repr__(self):
        return f"<Like {self.liked_by_id}→{self.target_kind}:{self.target_id}>"
