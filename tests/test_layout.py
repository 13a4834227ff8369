import math

import pytest

from family_moments.models.moment import Moment
from family_moments.pdf.layout import (
    CONTENT_BOTTOM,
    CONTENT_WIDTH,
    CONTINUATION_Y,
    FIRST_IMAGE_Y,
    MARKER_DIAMETER,
    layout_moment,
    marker_rect,
    scaled_height,
    track_rect,
)


def test_marker_at_extremes_is_centred_on_track_ends():
    track = track_rect()
    low = marker_rect(0.0)
    high = marker_rect(1.0)

    assert low.x == pytest.approx(track.x - MARKER_DIAMETER / 2)
    assert high.x == pytest.approx(track.x + track.width - MARKER_DIAMETER / 2)
    assert low.y == pytest.approx(track.y - (MARKER_DIAMETER - track.height) / 2)


def test_marker_is_not_clamped_outside_range():
    track = track_rect()
    assert marker_rect(-0.5).x < track.x - MARKER_DIAMETER / 2
    assert marker_rect(1.5).x > track.x + track.width


def test_header_geometry():
    moment = Moment.create("Sunny day", emotion=0.8)
    (page,) = layout_moment(moment, [])
    header = page.header

    assert header.date_rect.y == 20 and header.date_rect.height == 20
    assert header.description_rect.y == 50 and header.description_rect.height == 50
    assert header.track.width == CONTENT_WIDTH == 572
    assert header.marker.x == pytest.approx(20 + 572 * 0.8 - 5)
    assert page.images == []


def test_scaled_height_preserves_aspect():
    assert scaled_height((100, 50)) == pytest.approx(286)
    assert scaled_height((0, 50)) is None
    assert scaled_height((50, 0)) is None


def test_images_that_fit_stay_on_first_page():
    moment = Moment.create("x")
    pages = layout_moment(moment, [(572, 100), (572, 200)])

    assert len(pages) == 1
    first, second = pages[0].images
    assert first.rect.y == FIRST_IMAGE_Y
    assert second.rect.y == pytest.approx(FIRST_IMAGE_Y + 100 + 10)


def test_overflowing_image_starts_continuation_page():
    moment = Moment.create("x")
    # each square image scales to 572pt tall
    pages = layout_moment(moment, [(100, 100)] * 3)

    assert len(pages) == 3
    assert pages[0].header is not None
    assert pages[1].header is None and pages[2].header is None
    assert [len(p.images) for p in pages] == [1, 1, 1]
    assert pages[1].images[0].rect.y == CONTINUATION_Y
    for page in pages:
        for placement in page.images:
            assert placement.rect.y + placement.rect.height <= CONTENT_BOTTOM


def test_page_count_matches_available_height():
    moment = Moment.create("x")
    # 300pt images: 2 on the first page (130..740), then 2 per continuation page
    pages = layout_moment(moment, [(572, 300)] * 6)
    per_page = math.floor((CONTENT_BOTTOM - CONTINUATION_Y + 10) / 310)
    assert per_page == 2
    assert len(pages) == 3
    assert [len(p.images) for p in pages] == [2, 2, 2]


def test_undecodable_and_degenerate_images_are_skipped():
    moment = Moment.create("x")
    pages = layout_moment(moment, [None, (0, 40), (572, 100)])

    (page,) = pages
    (placement,) = page.images
    assert placement.index == 2
    assert placement.rect.y == FIRST_IMAGE_Y


@pytest.mark.parametrize("emotion", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_emotion_has_no_marker(emotion):
    moment = Moment(id="A", date=Moment.create("x").date, description="x", emotion=emotion)
    (page,) = layout_moment(moment, [])
    assert page.header.marker is None
