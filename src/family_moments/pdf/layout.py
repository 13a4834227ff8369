"""Page geometry for the moments PDF.

All rectangles here use a top-left origin with y growing downward, matching
how a page is read. The renderer flips them into PDF coordinates.
"""

import math
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence, Tuple

from family_moments.config import (
    BOTTOM_MARGIN,
    IMAGE_SPACING,
    PAGE_HEIGHT,
    PAGE_MARGIN,
    PAGE_WIDTH,
)
from family_moments.log import get_logger
from family_moments.models.moment import Moment
from family_moments.utils import format_timestamp

log = get_logger(__name__)

CONTENT_WIDTH = PAGE_WIDTH - 2 * PAGE_MARGIN

DATE_RECT_Y = 20.0
DATE_RECT_HEIGHT = 20.0
DESCRIPTION_RECT_Y = 50.0
DESCRIPTION_RECT_HEIGHT = 50.0

TRACK_Y = 110.0
TRACK_HEIGHT = 4.0
MARKER_DIAMETER = 10.0

FIRST_IMAGE_Y = TRACK_Y + MARKER_DIAMETER + IMAGE_SPACING
CONTINUATION_Y = PAGE_MARGIN
CONTENT_BOTTOM = PAGE_HEIGHT - BOTTOM_MARGIN


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float


@dataclass
class HeaderLayout:
    date_text: str
    date_rect: Rect
    description: str
    description_rect: Rect
    track: Rect
    marker: Optional[Rect]     # emotion 非有限数时不画


@dataclass
class ImagePlacement:
    index: int      # 在 moment.images 中的下标
    rect: Rect


@dataclass
class PageLayout:
    moment_id: str
    header: Optional[HeaderLayout] = None   # 续页没有 header
    images: List[ImagePlacement] = field(default_factory=list)


def track_rect() -> Rect:
    return Rect(PAGE_MARGIN, TRACK_Y, CONTENT_WIDTH, TRACK_HEIGHT)


def marker_rect(emotion: float) -> Rect:
    """Marker centred on ``track start + track width * emotion``; never clamped."""
    track = track_rect()
    x = track.x + track.width * emotion - MARKER_DIAMETER / 2
    y = track.y - (MARKER_DIAMETER - track.height) / 2
    return Rect(x, y, MARKER_DIAMETER, MARKER_DIAMETER)


def scaled_height(size: Tuple[int, int], width: float = CONTENT_WIDTH) -> Optional[float]:
    """Height of an image scaled to ``width``, or None when its size is degenerate."""
    w, h = size
    if w <= 0 or h <= 0:
        return None
    return width * (h / w)


def build_header(moment: Moment) -> HeaderLayout:
    marker = None
    if math.isfinite(moment.emotion):
        marker = marker_rect(moment.emotion)
    else:
        log.warning("pdf_emotion_not_finite", moment_id=moment.id, emotion=str(moment.emotion))
    return HeaderLayout(
        date_text=format_timestamp(moment.date),
        date_rect=Rect(PAGE_MARGIN, DATE_RECT_Y, CONTENT_WIDTH, DATE_RECT_HEIGHT),
        description=moment.description,
        description_rect=Rect(PAGE_MARGIN, DESCRIPTION_RECT_Y, CONTENT_WIDTH, DESCRIPTION_RECT_HEIGHT),
        track=track_rect(),
        marker=marker,
    )


def layout_moment(moment: Moment, image_sizes: Sequence[Optional[Tuple[int, int]]]) -> List[PageLayout]:
    """
    单个 moment 的分页：
    1. 第一页画日期、描述、情绪滑条
    2. 图片依次缩放到内容宽度，放不下就开新页，游标回到顶部边距
    3. 无法解码（size 为 None）或尺寸为 0 的图片直接跳过，不移动游标

    ``image_sizes`` 与 ``moment.images`` 一一对应。
    """
    current = PageLayout(moment_id=moment.id, header=build_header(moment))
    pages = [current]
    cursor = FIRST_IMAGE_Y

    for index, size in enumerate(image_sizes):
        if size is None:
            log.debug("pdf_image_undecodable", moment_id=moment.id, index=index)
            continue
        height = scaled_height(size)
        if height is None:
            log.warning("pdf_image_degenerate", moment_id=moment.id, index=index, size=size)
            continue

        if cursor + height > CONTENT_BOTTOM:
            current = PageLayout(moment_id=moment.id)
            pages.append(current)
            cursor = CONTINUATION_Y

        current.images.append(ImagePlacement(index, Rect(PAGE_MARGIN, cursor, CONTENT_WIDTH, height)))
        cursor += height + IMAGE_SPACING

    return pages
