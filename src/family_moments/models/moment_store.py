from typing import Callable, Iterable, List, Optional, Tuple

from family_moments.config import MOMENTS_KEY
from family_moments.errors import MomentDecodeError, MomentEncodeError, MomentsError, StorageError
from family_moments.log import get_logger
from family_moments.models.codec import decode_moments, encode_moments
from family_moments.models.moment import Moment
from family_moments.storage.kv_store import KeyValueStore

log = get_logger(__name__)

Listener = Callable[["MomentStore"], None]


class MomentStore:
    """
    Moment 列表的唯一持有者：
    - 增 / 改 / 删 之后都会立即保存到 key-value 存储
    - 保存失败只记录日志，内存状态不回滚
    - 不加锁，所有操作应在同一个线程上执行
    """

    # ---------------------------------------------------------
    # 初始化
    # ---------------------------------------------------------
    def __init__(self, kv: KeyValueStore, key: str = MOMENTS_KEY, autoload: bool = True):
        self.kv = kv
        self.key = key
        self._moments: List[Moment] = []
        self._listeners: List[Listener] = []
        self.last_error: Optional[MomentsError] = None
        if autoload:
            self.load()

    @property
    def moments(self) -> List[Moment]:
        return list(self._moments)

    def __len__(self) -> int:
        return len(self._moments)

    def snapshot(self) -> Tuple[Moment, ...]:
        """Immutable copy of the current list, safe to hand to another thread."""
        return tuple(self._moments)

    def sorted_moments(self) -> List[Moment]:
        """Newest first, the default display order."""
        return sorted(self._moments, key=lambda m: m.date, reverse=True)

    def get(self, moment_id: str) -> Optional[Moment]:
        return next((m for m in self._moments if m.id == moment_id), None)

    # ---------------------------------------------------------
    # 订阅
    # ---------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---------------------------------------------------------
    # CRUD
    # ---------------------------------------------------------
    def add(self, description: str, images: Iterable[bytes] = (), emotion: float = 0.5) -> Moment:
        moment = Moment.create(description, images=images, emotion=emotion)
        self._moments.append(moment)
        log.info("moment_added", moment_id=moment.id, images=len(moment.images))
        self.save()
        self._notify()
        return moment

    def update(self, moment: Moment) -> bool:
        """Replace the record with the same id in place.

        Returns False, without touching the store, when no such id exists.
        """
        for i, existing in enumerate(self._moments):
            if existing.id == moment.id:
                # id 和 date 以已存的记录为准
                self._moments[i] = existing.revised(
                    description=moment.description,
                    images=moment.images,
                    emotion=moment.emotion,
                )
                log.info("moment_updated", moment_id=moment.id)
                self.save()
                self._notify()
                return True

        log.warning("moment_update_unknown_id", moment_id=moment.id)
        return False

    def delete_matching(self, ids: Iterable[str]) -> int:
        id_set = set(ids)
        before = len(self._moments)
        self._moments = [m for m in self._moments if m.id not in id_set]
        removed = before - len(self._moments)
        log.info("moments_deleted", requested=len(id_set), removed=removed)
        self.save()
        self._notify()
        return removed

    # ---------------------------------------------------------
    # 加载 / 保存
    # ---------------------------------------------------------
    def load(self) -> bool:
        try:
            blob = self.kv.get(self.key)
            if blob is None:
                log.debug("moments_blob_missing", key=self.key)
                return True
            moments = decode_moments(blob)
        except (StorageError, MomentDecodeError) as e:
            self.last_error = e
            log.error("moments_load_failed", key=self.key, error=str(e))
            return False

        self._moments = moments
        self.last_error = None
        log.info("moments_loaded", count=len(moments))
        self._notify()
        return True

    def save(self) -> bool:
        try:
            self.kv.set(self.key, encode_moments(self._moments))
        except (StorageError, MomentEncodeError) as e:
            self.last_error = e
            log.error("moments_save_failed", key=self.key, error=str(e))
            return False

        self.last_error = None
        return True
