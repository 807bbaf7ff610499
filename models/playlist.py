# models/playlist.py
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(BigInteger, primary_key=True, index=True)
    owner_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    owner = relationship("User", foreign_keys=[owner_id])

    def __repr__(self) -> str:
        return f"<Playlist id={self.id} owner={self.owner_id} name={self.name}>"


class PlaylistVideo(Base):
    __tablename__ = "playlist_videos"

    id = Column(BigInteger, primary_key=True)
    playlist_id = Column(
        BigInteger,
        ForeignKey("playlists.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    video_id = Column(
        BigInteger,
        ForeignKey("videos.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "playlist_id",
            "video_id",
            name="uq_playlist_video"
        ),
    )

    def __repr__(self) -> str:
        return f"<PlaylistVideo playlist={self.playlist_id} video={self.video_id}>"
