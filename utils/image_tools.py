# utils/image_tools.py
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

# Предельные размеры картинок по назначению
THUMBNAIL_SIZE = (1280, 720)
AVATAR_SIZE = (512, 512)
COVER_IMAGE_SIZE = (2048, 1152)


def compress_image_bytes(
    data: bytes,
    max_size: tuple[int, int] = THUMBNAIL_SIZE,
    quality: int = 80
) -> tuple[bytes, str]:
    """
    Готовит картинку (превью, аватар, обложку) к хранению:
    - открывает любой поддерживаемый Pillow формат;
    - поворачивает по EXIF и выбрасывает метаданные;
    - уменьшает до max_size с сохранением пропорций;
    - сохраняет в WebP, если исходник WebP, иначе в прогрессивный JPEG.

    Возвращает (compressed_bytes, ext), где ext равен "webp" или "jpg".
    Бросает ValueError, если файл не распознан как изображение.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        raise ValueError("File is not a supported image")

    orig_fmt = (img.format or "JPEG").upper()
    img = ImageOps.exif_transpose(img)
    img.thumbnail(max_size)

    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buf = BytesIO()
    if orig_fmt == "WEBP":
        img.save(buf, "WEBP", quality=quality)
        ext = "webp"
    else:
        img.save(buf, "JPEG", quality=quality, optimize=True, progressive=True)
        ext = "jpg"

    return buf.getvalue(), ext
