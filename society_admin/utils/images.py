"""
images.py - Deal image loading
Single responsibility: turn a picked file (or the clipboard) into an upload
tuple (filename, bytes, mime type) after checking it is a real image.
"""
import io
import logging
import os
from datetime import datetime

from PIL import Image, ImageGrab, UnidentifiedImageError

from society_admin.api.errors import ValidationError
from society_admin.config import MAX_IMAGE_BYTES

logger = logging.getLogger(__name__)

ImageUpload = tuple[str, bytes, str]

_MIME_BY_FORMAT = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


def check_image(filename: str, content: bytes) -> ImageUpload:
    """
    アップロード前の画像チェック。

    5MB を超えるもの、Pillow が開けないもの、対応外の形式は ValidationError。
    MIME タイプは拡張子ではなく実際のフォーマットから決める。
    """
    if len(content) > MAX_IMAGE_BYTES:
        raise ValidationError("Image size should be less than 5MB")
    try:
        with Image.open(io.BytesIO(content)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.debug(f"Rejected image {filename}: {e}")
        raise ValidationError("Please select a valid image file") from e
    mime = _MIME_BY_FORMAT.get(fmt or "")
    if mime is None:
        raise ValidationError("Please select a PNG, JPEG, GIF or WEBP image")
    return os.path.basename(filename) or "image", content, mime


def read_image(path: str) -> ImageUpload:
    """ファイルピッカーで選ばれたパスを読み込んでチェックする。"""
    try:
        size = os.path.getsize(path)
    except OSError as e:
        raise ValidationError("Could not read the selected file") from e
    if size > MAX_IMAGE_BYTES:
        raise ValidationError("Image size should be less than 5MB")
    with open(path, "rb") as f:
        content = f.read()
    return check_image(path, content)


def clipboard_image() -> ImageUpload | None:
    """Clipboard 画像を PNG として取り出す。画像が無ければ None。"""
    try:
        img = ImageGrab.grabclipboard()
    except (OSError, NotImplementedError) as e:
        logger.debug(f"Clipboard unavailable: {e}")
        return None
    if not isinstance(img, Image.Image):
        return None

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    filename = datetime.now().strftime("clipboard_%Y%m%d_%H%M%S.png")
    return check_image(filename, buf.getvalue())
