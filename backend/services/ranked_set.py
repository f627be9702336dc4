"""Deduplicating max-heap over scored items.

The backing list is a binary max-heap ordered by score (parent >= children),
paired with a set of known ids for O(1) duplicate detection. Queries never pop
from the heap: each one sorts a copy of the contents, so repeated queries are
side-effect free and the heap only changes through insert(), clear() and
restore().

Snapshots are the backing list serialized as-is (heap order, not sorted).
"""

import json
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from errors import PersistenceError

logger = logging.getLogger(__name__)

RESERVED_FIELDS = ("id", "score", "arrival_time")


@dataclass
class ScoredItem:
    """One ranked entry. `payload` is carried along but never interpreted."""

    id: str
    score: float
    arrival_time: float | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Flat record: payload fields next to id, score and arrival_time."""
        record = dict(self.payload)
        record["id"] = self.id
        record["score"] = self.score
        record["arrival_time"] = self.arrival_time
        return record

    @classmethod
    def from_dict(cls, record: dict) -> "ScoredItem":
        try:
            item_id = record["id"]
            score = record["score"]
        except KeyError as e:
            raise PersistenceError(f"Snapshot record missing field {e}") from e
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise PersistenceError(f"Snapshot record {item_id!r} has non-numeric score: {score!r}")
        arrival_time = record.get("arrival_time")
        if arrival_time is not None and (isinstance(arrival_time, bool) or not isinstance(arrival_time, (int, float))):
            raise PersistenceError(f"Snapshot record {item_id!r} has invalid arrival_time: {arrival_time!r}")
        payload = {k: v for k, v in record.items() if k not in RESERVED_FIELDS}
        return cls(
            id=str(item_id),
            score=score,
            arrival_time=arrival_time,
            payload=payload,
        )


def _parent(index: int) -> int:
    return (index - 1) // 2


class RankedSet:
    """Insertion-ordered max-heap of ScoredItems with id deduplication."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._heap: list[ScoredItem] = []
        self._ids: set[str] = set()
        self._last_arrival = -math.inf

    def __len__(self) -> int:
        return len(self._heap)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def size(self) -> int:
        return len(self._heap)

    def insert(self, item: ScoredItem) -> bool:
        """Add an item unless its id is already present (first write wins).

        Stamps arrival_time and sifts the item up while it strictly outscores
        its parent, so earlier items stay nearer the root on ties. Returns
        True if the item was added.
        """
        if item.id in self._ids:
            return False

        item.arrival_time = self._next_arrival()
        self._heap.append(item)
        self._ids.add(item.id)
        self._sift_up(len(self._heap) - 1)
        return True

    def clear(self) -> None:
        self._heap = []
        self._ids = set()

    def peek(self) -> ScoredItem | None:
        return self._heap[0] if self._heap else None

    def items(self) -> list[ScoredItem]:
        """Copy of the contents in backing-array (heap) order."""
        return list(self._heap)

    # -- queries ---------------------------------------------------------

    def top_by_score(self, n: int) -> list[ScoredItem]:
        """First n of a stable descending sort by score."""
        if n <= 0:
            return []
        return sorted(self._heap, key=lambda item: item.score, reverse=True)[:n]

    def top_by_recency(self, n: int) -> list[ScoredItem]:
        """First n of a stable descending sort by arrival time."""
        if n <= 0:
            return []
        return sorted(self._heap, key=_arrival_key, reverse=True)[:n]

    def max_score_group(self) -> list[ScoredItem]:
        """Every item tied at the maximum score, in score-sorted order."""
        if not self._heap:
            return []
        best = max(item.score for item in self._heap)
        return [item for item in self.top_by_score(len(self._heap)) if item.score == best]

    # -- heap maintenance ------------------------------------------------

    def is_heap_ordered(self) -> bool:
        heap = self._heap
        return all(heap[_parent(i)].score >= heap[i].score for i in range(1, len(heap)))

    def heapify(self) -> None:
        """Rebuild heap order in place (used for snapshots that fail validation)."""
        for index in range(len(self._heap) // 2 - 1, -1, -1):
            self._sift_down(index)

    def _sift_up(self, index: int) -> None:
        heap = self._heap
        while index > 0:
            parent = _parent(index)
            if heap[parent].score >= heap[index].score:
                break
            heap[parent], heap[index] = heap[index], heap[parent]
            index = parent

    def _sift_down(self, index: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            largest = index
            for child in (2 * index + 1, 2 * index + 2):
                if child < size and heap[child].score > heap[largest].score:
                    largest = child
            if largest == index:
                return
            heap[largest], heap[index] = heap[index], heap[largest]
            index = largest

    def _next_arrival(self) -> float:
        # Strictly increasing, even when the clock does not advance between inserts.
        now = self._clock()
        if now <= self._last_arrival:
            now = math.nextafter(self._last_arrival, math.inf)
        self._last_arrival = now
        return now

    # -- persistence -----------------------------------------------------

    def serialize(self) -> bytes:
        """Backing array in its current heap order, as UTF-8 JSON."""
        records = [item.to_dict() for item in self._heap]
        return json.dumps(records, indent=2).encode("utf-8")

    def restore(self, data: bytes | str) -> None:
        """Replace the contents with a serialized snapshot, verbatim.

        Heap order is not re-validated here; see is_heap_ordered()/heapify().
        Raises PersistenceError if the data is not a list of item records, in
        which case the current contents are left untouched.
        """
        try:
            records = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Snapshot is not valid JSON: {e}") from e
        if not isinstance(records, list):
            raise PersistenceError("Snapshot must be a JSON array of items")

        heap: list[ScoredItem] = []
        ids: set[str] = set()
        for record in records:
            if not isinstance(record, dict):
                raise PersistenceError(f"Snapshot entry is not an object: {record!r}")
            item = ScoredItem.from_dict(record)
            if item.id in ids:
                logger.warning("Snapshot contains duplicate id %s; keeping first", item.id)
                continue
            heap.append(item)
            ids.add(item.id)

        self._heap = heap
        self._ids = ids
        arrivals = [item.arrival_time for item in heap if item.arrival_time is not None]
        self._last_arrival = max(arrivals, default=-math.inf)


def _arrival_key(item: ScoredItem) -> float:
    return item.arrival_time if item.arrival_time is not None else -math.inf
