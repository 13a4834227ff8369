"""JSON wire format for the persisted moment list.

Shape (one object per moment, list order preserved)::

    {"id": "...", "date": "2024-05-01T09:30:00+08:00", "description": "...",
     "imageDatas": ["<base64>", ...], "emotion": 0.8}

A numeric ``date`` is accepted on decode as seconds since the Apple reference
date (2001-01-01 UTC), which is how the original iOS app wrote it.
"""

import base64
import binascii
import json
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Sequence

from family_moments.errors import MomentDecodeError, MomentEncodeError
from family_moments.models.moment import Moment

APPLE_REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)


def moment_to_dict(moment: Moment) -> Dict[str, Any]:
    return {
        "id": moment.id,
        "date": moment.date.isoformat(),
        "description": moment.description,
        "imageDatas": [base64.b64encode(data).decode("ascii") for data in moment.images],
        "emotion": moment.emotion,
    }


def _parse_date(raw: Any) -> datetime:
    if isinstance(raw, bool):
        raise MomentDecodeError(f"invalid date value: {raw!r}")
    if isinstance(raw, (int, float)):
        return (APPLE_REFERENCE_DATE + timedelta(seconds=raw)).astimezone()
    if isinstance(raw, str):
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError as e:
            raise MomentDecodeError(f"invalid date string: {raw!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.astimezone()
        return parsed
    raise MomentDecodeError(f"invalid date value: {raw!r}")


def moment_from_dict(raw: Dict[str, Any]) -> Moment:
    if not isinstance(raw, dict):
        raise MomentDecodeError(f"expected an object, got {type(raw).__name__}")
    try:
        moment_id = raw["id"]
        description = raw["description"]
        emotion = raw["emotion"]
        images_raw = raw.get("imageDatas", [])
        date_raw = raw["date"]
    except KeyError as e:
        raise MomentDecodeError(f"missing field {e.args[0]!r}") from e

    if not isinstance(moment_id, str) or not isinstance(description, str):
        raise MomentDecodeError("id and description must be strings")
    if isinstance(emotion, bool) or not isinstance(emotion, (int, float)):
        raise MomentDecodeError(f"emotion must be a number, got {emotion!r}")
    if not math.isfinite(emotion):
        raise MomentDecodeError(f"emotion must be finite, got {emotion!r}")
    if not isinstance(images_raw, list):
        raise MomentDecodeError("imageDatas must be a list")

    try:
        images = tuple(base64.b64decode(b64, validate=True) for b64 in images_raw)
    except (binascii.Error, TypeError, ValueError) as e:
        raise MomentDecodeError(f"invalid image data in moment {moment_id}") from e

    return Moment(
        id=moment_id,
        date=_parse_date(date_raw),
        description=description,
        images=images,
        emotion=float(emotion),
    )


def encode_moments(moments: Sequence[Moment]) -> bytes:
    try:
        payload = [moment_to_dict(m) for m in moments]
        return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError, AttributeError) as e:
        raise MomentEncodeError(f"failed to encode moments: {e}") from e


def decode_moments(blob: bytes) -> List[Moment]:
    try:
        data = json.loads(blob)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MomentDecodeError(f"blob is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise MomentDecodeError(f"expected a list of moments, got {type(data).__name__}")
    return [moment_from_dict(item) for item in data]
