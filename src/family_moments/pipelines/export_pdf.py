import textwrap
from concurrent.futures import Future, ThreadPoolExecutor
from io import BytesIO
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image

from family_moments.config import FONT_SIZE, JPEG_QUALITY, PAGE_HEIGHT, PAGE_WIDTH
from family_moments.errors import ExportError
from family_moments.log import get_logger
from family_moments.models.moment import Moment
from family_moments.pdf.builder import Canvas, JpegImage, Page, build_document
from family_moments.pdf.layout import PageLayout, Rect, layout_moment
from family_moments.pipelines.ingest_image import IMAGE_ERRORS, encode_jpeg, upright

log = get_logger(__name__)

TEXT_LEADING = FONT_SIZE * 1.2
# Helvetica 平均字宽约为字号的一半
AVG_CHAR_WIDTH = FONT_SIZE * 0.5
TRACK_GRAY = 0.667
MARKER_GRAY = 0.333


# ------------------------------------------------------------
# 1. 图片解码
# ------------------------------------------------------------
def decode_image(data: bytes, quality: int = JPEG_QUALITY) -> Optional[JpegImage]:
    """Decode raw image bytes into an embeddable JPEG, or None if they are not an image."""
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            img = upright(img)
            width, height = img.size
            if width <= 0 or height <= 0:
                return JpegImage(data=b"", width=width, height=height)
            jpeg = encode_jpeg(img, quality=quality)
    except IMAGE_ERRORS:
        return None
    return JpegImage(data=jpeg, width=width, height=height)


# ------------------------------------------------------------
# 2. 单页绘制
# ------------------------------------------------------------
def _pdf_y(rect: Rect) -> float:
    return PAGE_HEIGHT - rect.y - rect.height


def wrap_text(text: str, width: float) -> List[str]:
    max_chars = max(1, int(width / AVG_CHAR_WIDTH))
    lines: List[str] = []
    for paragraph in text.splitlines() or [""]:
        lines.extend(textwrap.wrap(paragraph, width=max_chars) or [""])
    return lines


def _text_box(canvas: Canvas, rect: Rect, lines: List[str]) -> None:
    # 超出文本框的部分直接被裁掉
    canvas.save_state()
    canvas.clip_rect(rect.x, _pdf_y(rect), rect.width, rect.height)
    baseline = PAGE_HEIGHT - rect.y - FONT_SIZE * 0.8
    canvas.multiline(rect.x, baseline, lines, FONT_SIZE, TEXT_LEADING)
    canvas.restore_state()


def render_page(layout: PageLayout, decoded: Sequence[Optional[JpegImage]]) -> Page:
    canvas = Canvas()
    images: Dict[str, JpegImage] = {}

    header = layout.header
    if header is not None:
        _text_box(canvas, header.date_rect, [header.date_text])
        _text_box(canvas, header.description_rect, wrap_text(header.description, header.description_rect.width))

        track = header.track
        canvas.fill_gray(TRACK_GRAY)
        canvas.rounded_rect_fill(track.x, _pdf_y(track), track.width, track.height, track.height / 2)

        marker = header.marker
        if marker is not None:
            canvas.fill_gray(MARKER_GRAY)
            canvas.ellipse_fill(marker.x, _pdf_y(marker), marker.width, marker.height)

    for placement in layout.images:
        name = f"Im{placement.index}"
        images[name] = decoded[placement.index]
        r = placement.rect
        canvas.image(name, r.x, _pdf_y(r), r.width, r.height)

    return Page(content=canvas.stream(), width=PAGE_WIDTH, height=PAGE_HEIGHT, images=images)


# ------------------------------------------------------------
# 3. 导出入口
# ------------------------------------------------------------
def paginate(moment: Moment) -> Tuple[List[PageLayout], List[Optional[JpegImage]]]:
    decoded = [decode_image(data) for data in moment.images]
    sizes = [(img.width, img.height) if img is not None else None for img in decoded]
    return layout_moment(moment, sizes), decoded


def export_pdf(moments: Sequence[Moment]) -> bytes:
    """
    把 moments 按给定顺序导出为 PDF（不重新排序）：
    - 每个 moment 从新的一页开始
    - 图片放不下时自动续页
    - 空列表得到一个 0 页的合法 PDF
    """
    pages: List[Page] = []
    for moment in moments:
        layouts, decoded = paginate(moment)
        pages.extend(render_page(layout, decoded) for layout in layouts)

    try:
        data = build_document(pages)
    except (UnicodeError, ValueError) as e:
        raise ExportError(f"failed to assemble PDF: {e}") from e

    log.info("pdf_exported", moments=len(moments), pages=len(pages), size=len(data))
    return data


class MomentExporter:
    """
    后台导出：
    - submit 时对列表做快照，之后 store 的修改不影响正在进行的导出
    - 单个后台线程，不支持取消正在运行的任务，也没有超时
    """

    def __init__(self, render: Callable[[Sequence[Moment]], bytes] = export_pdf):
        self._render = render
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-export")

    def submit(
        self,
        moments: Sequence[Moment],
        callback: Optional[Callable[["Future[bytes]"], None]] = None,
    ) -> "Future[bytes]":
        snapshot = tuple(moments)
        log.debug("pdf_export_submitted", moments=len(snapshot))
        future = self._executor.submit(self._render, snapshot)
        if callback is not None:
            future.add_done_callback(callback)
        return future

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "MomentExporter":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=True)
