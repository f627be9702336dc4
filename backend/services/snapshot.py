"""On-disk snapshots of a RankedSet, one JSON file per cache slot."""

import logging
import os
import tempfile
from pathlib import Path

from errors import PersistenceError
from services.ranked_set import RankedSet

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load_into(self, ranked_set: RankedSet) -> bool:
        """Hydrate ranked_set from the snapshot file.

        Returns False (leaving the set as it was) when the file is missing or
        cannot be parsed. A snapshot whose heap order was broken, e.g. by hand
        editing, is re-heapified after loading.
        """
        if not self.exists():
            logger.info("No snapshot at %s; starting empty", self.path)
            return False

        try:
            ranked_set.restore(self.path.read_bytes())
        except (OSError, PersistenceError) as e:
            logger.error("Error loading snapshot %s: %s", self.path, e)
            return False

        if not ranked_set.is_heap_ordered():
            logger.warning("Snapshot %s violates heap order; re-heapifying", self.path)
            ranked_set.heapify()

        logger.info("Loaded %d items from %s", ranked_set.size(), self.path)
        return True

    def save(self, ranked_set: RankedSet) -> bool:
        """Overwrite the snapshot file. Failures are logged, not raised."""
        data = ranked_set.serialize()
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(data)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Error saving snapshot %s: %s", self.path, e)
            return False

        logger.info("Saved %d items to %s", ranked_set.size(), self.path)
        return True
