from io import BytesIO
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from family_moments.config import JPEG_QUALITY, PHOTO_EXTS
from family_moments.log import get_logger

log = get_logger(__name__)


IMAGE_ERRORS = (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError)


def upright(img: Image.Image) -> Image.Image:
    """Apply the EXIF Orientation tag so the pixels match how the photo is displayed."""
    return ImageOps.exif_transpose(img)


def encode_jpeg(img: Image.Image, quality: int = JPEG_QUALITY) -> bytes:
    """Re-encode a PIL image as upright RGB JPEG at a fixed quality."""
    buf = BytesIO()
    upright(img).convert("RGB").save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def load_photo(path: Path | str, quality: int = JPEG_QUALITY) -> bytes:
    """
    读取一张照片：
    1. 用 PIL 打开并完整解码
    2. 按 EXIF 方向摆正，再统一重新编码为 JPEG（固定质量）
    """
    with Image.open(path) as img:
        img.load()
        return encode_jpeg(img, quality=quality)


def is_photo_path(path: Path | str) -> bool:
    return Path(path).suffix.lower() in PHOTO_EXTS


def ingest_photos(
    paths: Iterable[Path | str],
    on_loaded: Optional[Callable[[bytes], None]] = None,
    quality: int = JPEG_QUALITY,
) -> List[bytes]:
    """
    批量导入照片，每张独立处理：
    - 单张失败只记录日志并跳过，不影响其他照片
    - 成功的照片按输入顺序返回，同时逐张回调 on_loaded
    """
    loaded: List[bytes] = []
    for p in paths:
        if not is_photo_path(p):
            log.warning("photo_skipped_extension", path=str(p))
            continue
        try:
            data = load_photo(p, quality=quality)
        except IMAGE_ERRORS as e:
            log.warning("photo_load_failed", path=str(p), error=str(e))
            continue

        loaded.append(data)
        if on_loaded is not None:
            on_loaded(data)

    log.debug("photos_ingested", loaded=len(loaded))
    return loaded
