import logging
import mimetypes
import uuid
from io import BytesIO
from typing import BinaryIO, Optional, Tuple

from minio import Minio
from minio.error import S3Error

from core.config import settings
from core.errors import Internal
from utils.image_tools import AVATAR_SIZE, COVER_IMAGE_SIZE, THUMBNAIL_SIZE, compress_image_bytes

logger = logging.getLogger(__name__)

# Видео грузим потоком частями по 10 МБ
PART_SIZE = 10 * 1024 * 1024

# ==== Настройка клиента MinIO ====
_endpoint = settings.AWS_S3_ENDPOINT_URL.replace("https://", "").replace("http://", "")
_s3 = Minio(
    endpoint=_endpoint,
    access_key=settings.AWS_ACCESS_KEY_ID,
    secret_key=settings.AWS_SECRET_ACCESS_KEY,
    region=settings.AWS_S3_REGION,
    secure=settings.AWS_S3_SECURE,
)


def build_object_url(s3_key: str) -> str:
    """Постоянный публичный URL объекта."""
    return f"{settings.s3_base_url}/{s3_key}"


def _object_key(folder: str, file_name: str, ext: str) -> str:
    stem = (file_name or "file").rsplit(".", 1)[0].replace("/", "_")
    return f"{folder}/{stem}_{uuid.uuid4().hex}.{ext}"


def upload_video_to_s3(file_like: BinaryIO, file_name: str, bucket_name: str) -> str:
    """
    Кладёт видеофайл в S3 потоком, без чтения целиком в память.
    Возвращает URL. Бросает Internal, если S3 недоступен.
    """
    _, dot, suffix = (file_name or "").rpartition(".")
    ext = suffix.lower() if dot and suffix else "mp4"
    s3_key = _object_key("videos", file_name, ext)
    content_type = mimetypes.guess_type(f"x.{ext}")[0] or "application/octet-stream"
    try:
        _s3.put_object(
            bucket_name=bucket_name,
            object_name=s3_key,
            data=file_like,
            length=-1,
            part_size=PART_SIZE,
            content_type=content_type,
        )
    except S3Error as e:
        logger.error("Video upload to S3 failed: %s", e)
        raise Internal("Failed to save the video file") from e
    return build_object_url(s3_key)


def upload_image_to_s3(
    file_like: BinaryIO,
    file_name: str,
    bucket_name: str,
    folder: str = "thumbnails",
    max_size: Tuple[int, int] = THUMBNAIL_SIZE,
) -> str:
    """
    Сжимает картинку через compress_image_bytes и кладёт в S3 в папку folder.
    Бросает ValueError, если файл не изображение, Internal при проблемах с S3.
    """
    data = file_like.read()
    compressed_data, ext = compress_image_bytes(data, max_size)
    s3_key = _object_key(folder, file_name, ext)
    try:
        _s3.put_object(
            bucket_name=bucket_name,
            object_name=s3_key,
            data=BytesIO(compressed_data),
            length=len(compressed_data),
            content_type=f"image/{'jpeg' if ext == 'jpg' else ext}",
        )
    except S3Error as e:
        logger.error("Image upload to S3 failed (%s): %s", folder, e)
        raise Internal("Failed to save the image") from e
    return build_object_url(s3_key)


def upload_thumbnail_to_s3(file_like: BinaryIO, file_name: str, bucket_name: str) -> str:
    return upload_image_to_s3(file_like, file_name, bucket_name, "thumbnails", THUMBNAIL_SIZE)


def upload_avatar_to_s3(file_like: BinaryIO, file_name: str, bucket_name: str) -> str:
    return upload_image_to_s3(file_like, file_name, bucket_name, "avatars", AVATAR_SIZE)


def upload_cover_image_to_s3(file_like: BinaryIO, file_name: str, bucket_name: str) -> str:
    return upload_image_to_s3(file_like, file_name, bucket_name, "covers", COVER_IMAGE_SIZE)


def delete_object_by_url(url: Optional[str], bucket_name: str) -> bool:
    """
    Удаляет объект, на который указывает наш URL. Чужие URL не трогаем.
    Ошибка S3 только логируется: объект без ссылок не ломает данные.
    """
    prefix = f"{settings.s3_base_url}/"
    if not url or not url.startswith(prefix):
        return False
    s3_key = url[len(prefix):]
    try:
        _s3.remove_object(bucket_name=bucket_name, object_name=s3_key)
    except S3Error as e:
        logger.warning("Could not remove %s from S3: %s", s3_key, e)
        return False
    return True
