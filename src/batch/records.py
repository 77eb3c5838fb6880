"""
Batch Records

Typed containers carried from the batch processor to its consumers
(tables, UHI analytics). Values stay numeric end to end.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional
import math
import threading


@dataclass(frozen=True)
class BatchRecordResult:
    """Inference output for one input record"""
    identifier: Hashable
    value: Optional[float]
    matched: bool
    index: int

    @property
    def is_defined(self) -> bool:
        return self.value is not None and not math.isnan(self.value)


@dataclass(frozen=True)
class SkippedRecord:
    """An input record that could not be evaluated, and why"""
    index: int
    identifier: Optional[Hashable]
    reason: str


@dataclass
class BatchResult:
    """
    Output of a batch run

    results keeps input order; len(results) == total - skipped_count for a
    batch that was not cancelled.
    """
    total: int = 0
    results: List[BatchRecordResult] = field(default_factory=list)
    skipped: List[SkippedRecord] = field(default_factory=list)
    cancelled: bool = False

    @property
    def processed_count(self) -> int:
        """Records evaluated successfully"""
        return len(self.results)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def seen_count(self) -> int:
        """Records handled so far, evaluated or skipped"""
        return len(self.results) + len(self.skipped)

    @property
    def identifiers(self) -> List[Hashable]:
        return [r.identifier for r in self.results]

    @property
    def values(self) -> List[Optional[float]]:
        return [r.value for r in self.results]

    def as_pairs(self) -> List[tuple]:
        """(identifier, value) pairs in input order"""
        return [(r.identifier, r.value) for r in self.results]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'processed': self.processed_count,
            'skipped': self.skipped_count,
            'cancelled': self.cancelled,
            'results': [
                {'identifier': r.identifier, 'value': r.value, 'matched': r.matched}
                for r in self.results
            ],
            'skipped_records': [
                {'index': s.index, 'identifier': s.identifier, 'reason': s.reason}
                for s in self.skipped
            ],
        }


@dataclass(frozen=True)
class BatchProgress:
    """
    Snapshot yielded between chunks of a cooperative batch run

    result is the live BatchResult of the run; it is complete once done is True.
    """
    processed: int
    total: int
    done: bool
    result: BatchResult = field(repr=False)

    @property
    def fraction(self) -> float:
        return 1.0 if self.total == 0 else self.processed / self.total


class CancellationToken:
    """Thread-safe flag checked by the batch processor between records"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
