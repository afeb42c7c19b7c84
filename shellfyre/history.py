import logging
import os

from shellfyre.config import MAX_DIR_HISTORY

logger = logging.getLogger(__name__)


class DirectoryHistory:
    """
    Log of visited working directories, one path per line, oldest first.
    The file is not locked: two shells sharing it can interleave writes.
    """

    def __init__(self, path, limit=MAX_DIR_HISTORY):
        self.path = path
        self.limit = limit

    def record(self, directory):
        """Append a directory, then keep only the last `limit` lines."""
        with open(self.path, "a") as f:
            f.write(f"{directory}\n")
        self._truncate()

    def _truncate(self):
        with open(self.path) as f:
            lines = f.readlines()
        if len(lines) <= self.limit:
            return
        logger.debug("trimming %s from %d to %d lines", self.path, len(lines), self.limit)
        with open(self.path, "w") as f:
            f.writelines(lines[-self.limit:])

    def load(self):
        """
        Read the history into a list, oldest first.
        A missing file is an empty history.
        """
        if not os.path.exists(self.path):
            return []
        with open(self.path) as f:
            return [line.rstrip("\n") for line in f]
