import base64
import json
from datetime import datetime, timezone

import pytest

from family_moments.errors import MomentDecodeError, MomentEncodeError
from family_moments.models.codec import decode_moments, encode_moments, moment_to_dict
from family_moments.models.moment import Moment


def _sample(make_image):
    return [
        Moment.create("Sunny day", emotion=0.8),
        Moment.create("Beach", images=[make_image(10, 20), b"\x00\x01raw"], emotion=0.25),
        Moment.create("", emotion=1.5),
    ]


def test_round_trip_preserves_content_and_order(make_image):
    moments = _sample(make_image)
    decoded = decode_moments(encode_moments(moments))
    assert decoded == moments
    assert [m.id for m in decoded] == [m.id for m in moments]


def test_round_trip_empty_list():
    assert decode_moments(encode_moments([])) == []


def test_wire_field_names():
    moment = Moment.create("hi", images=[b"abc"], emotion=0.3)
    raw = moment_to_dict(moment)
    assert set(raw) == {"id", "date", "description", "imageDatas", "emotion"}
    assert raw["imageDatas"] == [base64.b64encode(b"abc").decode("ascii")]
    assert datetime.fromisoformat(raw["date"]) == moment.date


def test_numeric_date_uses_apple_reference_date():
    blob = json.dumps([
        {"id": "A", "date": 0, "description": "x", "imageDatas": [], "emotion": 0.5},
        {"id": "B", "date": 86400.5, "description": "y", "imageDatas": [], "emotion": 1},
    ]).encode()
    a, b = decode_moments(blob)
    assert a.date == datetime(2001, 1, 1, tzinfo=timezone.utc)
    assert b.date == datetime(2001, 1, 2, 0, 0, 0, 500000, tzinfo=timezone.utc)
    assert b.emotion == 1.0


def test_missing_image_list_defaults_to_empty():
    blob = json.dumps([{"id": "A", "date": "2024-01-01T10:00:00+00:00", "description": "x", "emotion": 0.1}])
    (moment,) = decode_moments(blob.encode())
    assert moment.images == ()


@pytest.mark.parametrize(
    "blob",
    [
        b"not json",
        b'{"id": "A"}',
        b'[{"id": "A", "description": "x", "emotion": 0.5, "imageDatas": []}]',
        b'[{"id": "A", "date": "yesterday", "description": "x", "emotion": 0.5}]',
        b'[{"id": "A", "date": 0, "description": "x", "emotion": "high"}]',
        b'[{"id": "A", "date": 0, "description": "x", "emotion": 0.5, "imageDatas": ["%%%"]}]',
        b"[42]",
    ],
)
def test_malformed_blobs_raise_decode_error(blob):
    with pytest.raises(MomentDecodeError):
        decode_moments(blob)


@pytest.mark.parametrize("emotion", [float("nan"), float("inf")])
def test_create_rejects_non_finite_emotion(emotion):
    with pytest.raises(ValueError):
        Moment.create("x", emotion=emotion)
    with pytest.raises(ValueError):
        Moment.create("x").revised(emotion=emotion)


def test_non_finite_emotion_is_not_written_or_read():
    bad = Moment(id="A", date=datetime.now(timezone.utc), description="x", emotion=float("nan"))
    with pytest.raises(MomentEncodeError):
        encode_moments([bad])

    blob = b'[{"id": "A", "date": 0, "description": "x", "emotion": NaN}]'
    with pytest.raises(MomentDecodeError):
        decode_moments(blob)
