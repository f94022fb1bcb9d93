# utils/first_launch.py
import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class FirstLaunchFlag:
    """Durable "first launch finished" marker kept as a file on disk.

    With no path the flag lives in memory only, which is what in-memory
    stores use.
    """

    def __init__(self, marker_path=None):
        self.marker_path = Path(marker_path) if marker_path else None
        self._completed = False

    def is_first_launch(self):
        if self.marker_path is None:
            return not self._completed
        return not self.marker_path.exists()

    def mark_complete(self):
        self._completed = True
        if self.marker_path is None:
            return
        self.marker_path.parent.mkdir(parents=True, exist_ok=True)
        self.marker_path.write_text(f"{int(time.time() * 1000)}\n", encoding='utf-8')
        logger.info(f"First launch marked complete at {self.marker_path}")

    def reset(self):
        self._completed = False
        if self.marker_path is not None and self.marker_path.exists():
            self.marker_path.unlink()
