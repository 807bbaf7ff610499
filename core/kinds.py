import enum


class TargetKind(str, enum.Enum):
    """Цели, на которые ставятся факты-отношения (лайк или подписка)."""

    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"
    CHANNEL = "channel"

    @property
    def is_like(self) -> bool:
        return self is not TargetKind.CHANNEL


class EntityKind(str, enum.Enum):
    """Сущности, для которых собираются представления."""

    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"
    PLAYLIST = "playlist"
    CHANNEL = "channel"


LIKE_TARGET_KINDS = tuple(kind.value for kind in TargetKind if kind.is_like)
