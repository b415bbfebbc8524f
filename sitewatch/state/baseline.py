"""BaselineTracker — rolling window of inline CSS samples for spike detection."""

from __future__ import annotations

from collections import deque

from sitewatch.core.types import BaselineSample
from sitewatch.state.store import BASELINE_KEY, KeyValueStore

MAX_SAMPLES = 30


class BaselineTracker:
    """Bounded FIFO of ``BaselineSample`` persisted independently of warnings.

    Samples recorded during a run stay in memory until ``save()``; the
    scheduler commits them once the run completes. The average is
    recomputed from the stored samples on every query.
    """

    def __init__(self, store: KeyValueStore, max_samples: int = MAX_SAMPLES) -> None:
        self._store = store
        self._samples: deque[BaselineSample] = deque(maxlen=max_samples)
        self._dirty = False
        self.load()

    @property
    def samples(self) -> list[BaselineSample]:
        return list(self._samples)

    @property
    def max_samples(self) -> int:
        return self._samples.maxlen or MAX_SAMPLES

    def __len__(self) -> int:
        return len(self._samples)

    def load(self) -> None:
        """Reload samples from the store, discarding unsaved ones."""
        raw = self._store.get(BASELINE_KEY, {})
        history = raw.get("history", []) if isinstance(raw, dict) else []
        self._samples.clear()
        for item in history:
            if isinstance(item, dict):
                self._samples.append(BaselineSample.model_validate(item))
        self._dirty = False

    def record(self, size_bytes: int, timestamp: float) -> BaselineSample:
        """Append a sample; the oldest is evicted beyond ``max_samples``."""
        sample = BaselineSample(size_bytes=size_bytes, timestamp=timestamp)
        self._samples.append(sample)
        self._dirty = True
        return sample

    def average(self) -> float | None:
        """Mean sample size in bytes, or None when no samples exist."""
        if not self._samples:
            return None
        return sum(s.size_bytes for s in self._samples) / len(self._samples)

    def save(self) -> None:
        if not self._dirty:
            return
        self._store.set(
            BASELINE_KEY,
            {"history": [s.model_dump() for s in self._samples]},
        )
        self._dirty = False
