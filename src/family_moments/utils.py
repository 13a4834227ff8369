import uuid
from datetime import datetime

from family_moments.config import DATE_FORMAT


def now() -> datetime:
    return datetime.now().astimezone()


def new_moment_id() -> str:
    return str(uuid.uuid4()).upper()


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(DATE_FORMAT)
