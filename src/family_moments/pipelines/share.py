import tempfile
from pathlib import Path
from typing import Optional

from family_moments.config import EXPORT_FILENAME
from family_moments.log import get_logger

log = get_logger(__name__)


def write_for_sharing(
    data: bytes,
    directory: Optional[Path | str] = None,
    filename: str = EXPORT_FILENAME,
) -> Optional[Path]:
    """Write an exported document where it can be handed off.

    Defaults to the system temp directory. Returns None when the write fails;
    the failure is logged and not retried.
    """
    target_dir = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    path = target_dir / filename
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        log.error("pdf_write_failed", path=str(path), error=str(e))
        return None

    log.info("pdf_written", path=str(path), size=len(data))
    return path
