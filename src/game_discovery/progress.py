"""Progress reporting for traversals of unknown size.

The number of directories under a search root is not known until the walk is
over, and counting them first would mean reading the disk twice. Instead the
estimate starts absurdly high and converges towards an extrapolation from the
top-level directories completed so far.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

INITIAL_ESTIMATE = float(2 ** 24)
# 80% of the previous estimate plus a bit more than 20% of the new one, so the
# estimate runs slightly ahead and the bar doesn't sit at 100% while the last
# directories are read.
PREVIOUS_WEIGHT = 0.8
EXTRAPOLATED_WEIGHT = 0.202


class DirectoryEstimate:
    """Running estimate of the directory count below one root."""

    def __init__(self, root: str) -> None:
        self.root = root
        self.estimated_total = INITIAL_ESTIMATE
        self.seen_directories = 0
        self.top_level: set[str] = set()
        self.completed_top_level = 0

    def directory_seen(self, path: str, top_level: bool) -> None:
        self.seen_directories += 1
        if top_level:
            self.top_level.add(path)

    def directory_done(self, path: str) -> bool:
        """Record a finished subtree. True if the estimate changed."""
        if path not in self.top_level:
            return False
        self.completed_top_level += 1
        per_top_level = self.seen_directories / self.completed_top_level
        self.estimated_total = (
            max(self.estimated_total, self.seen_directories) * PREVIOUS_WEIGHT
            + per_top_level * len(self.top_level) * EXTRAPOLATED_WEIGHT
        )
        logger.debug(
            "updated estimate for %s: estimated=%.0f seen=%d top_level=%d completed=%d",
            self.root,
            self.estimated_total,
            self.seen_directories,
            len(self.top_level),
            self.completed_top_level,
        )
        return True

    def check_overrun(self) -> bool:
        """Push the estimate up if more directories were seen than estimated."""
        if self.estimated_total >= self.seen_directories:
            return False
        self.estimated_total = self.seen_directories * (
            (len(self.top_level) + 1) / max(self.completed_top_level, 1)
        )
        return True


class Progress:
    """Maps completed steps onto a percentage range and reports it.

    The reported percentage never decreases and stays below `end` until
    finish() is called.
    """

    def __init__(
        self,
        start: float,
        end: float,
        callback: Callable[[float, str], None],
    ) -> None:
        self._start = start
        self._end = end
        self._callback = callback
        self._step_count = 1.0
        self._done = 0
        self._percent = float(start)
        self._finished = False

    @property
    def percent(self) -> float:
        return self._percent

    def set_step_count(self, count: float) -> None:
        self._step_count = max(float(count), 1.0)

    def completed(self, label: str | None, count: int = 1) -> None:
        if self._finished:
            return
        self._done += count
        ratio = min(self._done / self._step_count, 1.0)
        percent = self._start + (self._end - self._start) * ratio
        # Only finish() may report the end of the range.
        percent = min(percent, self._end - 1)
        self._report(max(percent, self._percent), label)

    def finish(self, label: str | None) -> None:
        if self._finished:
            return
        self._finished = True
        self._report(float(self._end), label)

    def _report(self, percent: float, label: str | None) -> None:
        self._percent = percent
        self._callback(percent, label or "")
