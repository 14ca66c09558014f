from __future__ import annotations

from typing import Annotated, Final, TypeAlias

from typing_extensions import Doc

DEFAULT_TRACKER_THRESHOLD: Final[int] = 100_000

CompositeKey: TypeAlias = tuple[int, int]


class DuplicateTracker:
    """
    Bounded-memory set of association keys already emitted by one worker.

    Once it holds more than `threshold` keys it is cleared in full, so uniqueness is
    guaranteed only inside the current window and a pair can reappear after a reset.
    The table's composite primary key plus insert-or-ignore is the global guarantee;
    the tracker only saves round-trips for duplicates the database would drop anyway.
    """

    def __init__(self, threshold: int = DEFAULT_TRACKER_THRESHOLD):
        if threshold < 1:
            raise ValueError('threshold must be >= 1.')
        self.threshold = threshold
        self._seen: set[CompositeKey] = set()
        self._resets = 0

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def contains(self, key: CompositeKey) -> bool:
        return key in self._seen

    def record(self, key: CompositeKey) -> None:
        self._seen.add(key)

    def clear(self) -> None:
        self._seen.clear()
        self._resets += 1

    def maybe_reset(self) -> bool:
        """Clear the window if it outgrew the threshold. Called between batches."""
        if len(self._seen) > self.threshold:
            self.clear()
            return True
        return False

    @property
    def resets(self) -> Annotated[int, Doc('How many times the window was cleared.')]:
        return self._resets
