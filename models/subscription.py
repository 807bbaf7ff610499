# models/subscription.py
from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(BigInteger, primary_key=True)
    subscriber_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    channel_id = Column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "subscriber_id",
            "channel_id",
            name="uq_subscription_subscriber_channel"
        ),
    )

    subscriber = relationship("User", foreign_keys=[subscriber_id], backref="subscriptions")
    channel = relationship("User", foreign_keys=[channel_id], backref="subscribers")

    def __repr__(self):
        return f"<Subscription {self.subscriber_id}→{self.channel_id}>"
