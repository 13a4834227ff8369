import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional, Tuple

from family_moments.utils import new_moment_id, now


def finite_emotion(emotion: float) -> float:
    value = float(emotion)
    if not math.isfinite(value):
        raise ValueError(f"emotion must be a finite number, got {emotion!r}")
    return value


@dataclass(frozen=True)
class Moment:
    """
    单条 moment 记录：
    - id / date 创建后不可变
    - description / images / emotion 只能整体替换（见 revised）
    """
    id: str
    date: datetime
    description: str
    images: Tuple[bytes, ...] = field(default_factory=tuple)
    emotion: float = 0.5    # 0.0 = sad/negative, 1.0 = happy/positive，不做范围限制

    @classmethod
    def create(cls, description: str, images: Iterable[bytes] = (), emotion: float = 0.5) -> "Moment":
        return cls(
            id=new_moment_id(),
            date=now(),
            description=description,
            images=tuple(images),
            emotion=finite_emotion(emotion),
        )

    def revised(
        self,
        description: Optional[str] = None,
        images: Optional[Iterable[bytes]] = None,
        emotion: Optional[float] = None,
    ) -> "Moment":
        """Return a copy with the editable fields replaced; id and date are kept."""
        return replace(
            self,
            description=self.description if description is None else description,
            images=self.images if images is None else tuple(images),
            emotion=self.emotion if emotion is None else finite_emotion(emotion),
        )
