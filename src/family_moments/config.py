from pathlib import Path

# 存储
STORAGE_DIR = Path("data")
MOMENTS_KEY = "moments_key"

# 照片导入
PHOTO_EXTS = [".jpg", ".jpeg", ".png", ".heic", ".gif", ".bmp", ".tif", ".tiff", ".webp"]
JPEG_QUALITY = 80

# PDF 页面（US Letter，单位 pt）
PAGE_WIDTH = 612.0
PAGE_HEIGHT = 792.0
PAGE_MARGIN = 20.0
BOTTOM_MARGIN = 20.0
IMAGE_SPACING = 10.0

FONT_SIZE = 16.0
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

EXPORT_FILENAME = "moments.pdf"
