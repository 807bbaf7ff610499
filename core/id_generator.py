import random

# Двухзначные коды сущностей
TYPE_POSTFIX = {
    "users": 1,
    "videos": 2,
    "comments": 3,
    "likes": 4,
    "tweets": 5,
    "subscriptions": 6,
    "playlists": 7,
    "playlist_videos": 8,
    "watch_history": 9,
}


def generate_random_id(entity: str) -> int:
    """Возвращает 10-значный id: 8 случайных цифр + 2-значный постфикс."""
    if entity not in TYPE_POSTFIX:
        raise ValueError(f"Unknown entity for ID generation: {entity}")
    rand8 = random.randint(10_000_000, 99_999_999)
    postfix = TYPE_POSTFIX[entity]
    return rand8 * 100 + postfix
