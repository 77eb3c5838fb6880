"""
Batch Processor

Applies an InferenceEngine over an ordered collection of labeled records.
Each record is an (identifier, mapping) pair; the identifier (typically a
(longitude, latitude) tuple) is carried through untouched.

Records with a missing, unparsable or non-finite reading are skipped with a
reason and the batch continues. Work can be driven in bounded chunks
(iter_chunks) so a latency-sensitive host can interleave it with its own
loop, and a CancellationToken is honored between records.
"""
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Hashable, Iterable, Iterator, Mapping, Optional, Sequence, Tuple
import logging
import math

from src.fuzzy.engine import InferenceEngine
from src.fuzzy.errors import FuzzyError
from .records import BatchProgress, BatchRecordResult, BatchResult, CancellationToken, SkippedRecord

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

DEFAULT_PROGRESS_INTERVAL = 10
DEFAULT_CHUNK_SIZE = 10


class RecordError(Exception):
    """A single record cannot be evaluated"""


class BatchProcessor:
    """
    Batch driver for an inference engine

    Args:
        engine: Shared, read-only inference engine
        progress_callback: Called as callback(processed, total)
        progress_interval: Emit progress every N records (and once at the end)
        chunk_size: Records handled per step of iter_chunks()
    """

    def __init__(
        self,
        engine: InferenceEngine,
        progress_callback: Optional[ProgressCallback] = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        if progress_interval < 1:
            raise ValueError("progress_interval must be >= 1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        self.engine = engine
        self.progress_callback = progress_callback
        self.progress_interval = progress_interval
        self.chunk_size = chunk_size

    # ---------- record handling ----------

    def _split(self, record: Any) -> Tuple[Optional[Hashable], Mapping[str, Any]]:
        try:
            identifier, readings = record
        except (TypeError, ValueError):
            raise RecordError("record is not an (identifier, readings) pair") from None
        if not isinstance(readings, Mapping):
            raise RecordError(f"readings must be a mapping, got {type(readings).__name__}")
        return identifier, readings

    def _parse(self, readings: Mapping[str, Any]) -> Tuple[float, ...]:
        values = []
        for name in self.engine.variable_names:
            raw = readings.get(name)
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                raise RecordError(f"missing field '{name}'")
            if isinstance(raw, bool):
                raise RecordError(f"unparsable value for '{name}': {raw!r}")
            try:
                x = float(raw.strip() if isinstance(raw, str) else raw)
            except (TypeError, ValueError, OverflowError):
                raise RecordError(f"unparsable value for '{name}': {raw!r}") from None
            if not math.isfinite(x):
                raise RecordError(f"non-finite value for '{name}': {raw!r}")
            values.append(x)
        return tuple(values)

    def _process_one(self, index: int, record: Any, result: BatchResult) -> None:
        identifier = None
        try:
            identifier, readings = self._split(record)
            values = self._parse(readings)
            inference = self.engine.infer_vector(values)
        except (RecordError, FuzzyError) as e:
            logger.warning(f"Skipping record {index} ({identifier!r}): {e}")
            result.skipped.append(SkippedRecord(index=index, identifier=identifier, reason=str(e)))
            return

        result.results.append(BatchRecordResult(
            identifier=identifier,
            value=inference.value,
            matched=inference.matched,
            index=index,
        ))

    def _notify(self, processed: int, total: int) -> None:
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(processed, total)
        except Exception as e:
            logger.warning(f"Progress callback failed at {processed}/{total}: {e}")

    # ---------- API ----------

    def iter_chunks(
        self,
        records: Iterable[Any],
        cancel_token: Optional[CancellationToken] = None
    ) -> Iterator[BatchProgress]:
        """
        Process records cooperatively

        Handles at most chunk_size records, yields a BatchProgress, and resumes
        on the next iteration. The last snapshot has done=True and carries the
        complete BatchResult. Cancellation is checked before every record.
        """
        if not isinstance(records, Sequence):
            records = list(records)
        total = len(records)
        result = BatchResult(total=total)
        engine_name = self.engine.configuration.name

        logger.info(f"Starting batch of {total} records with configuration '{engine_name}'")

        processed = 0
        in_chunk = 0
        last_notified = -1

        for index, record in enumerate(records):
            if cancel_token is not None and cancel_token.cancelled:
                result.cancelled = True
                logger.info(f"Batch cancelled after {processed}/{total} records")
                break

            self._process_one(index, record, result)
            processed += 1

            if processed % self.progress_interval == 0 or processed == total:
                self._notify(processed, total)
                last_notified = processed

            in_chunk += 1
            if in_chunk >= self.chunk_size and processed < total:
                in_chunk = 0
                yield BatchProgress(processed=processed, total=total, done=False, result=result)

        if last_notified != processed:
            self._notify(processed, total)

        logger.info(
            f"Batch finished: {result.processed_count} evaluated, "
            f"{result.skipped_count} skipped, {total} total"
        )
        yield BatchProgress(processed=processed, total=total, done=True, result=result)

    def run(
        self,
        records: Iterable[Any],
        cancel_token: Optional[CancellationToken] = None
    ) -> BatchResult:
        """
        Process every record and return the batch result

        Never raises for per-record problems; see BatchResult.skipped.
        """
        progress = None
        for progress in self.iter_chunks(records, cancel_token=cancel_token):
            pass
        return progress.result

    def submit(
        self,
        records: Iterable[Any],
        executor: Optional[Executor] = None,
        cancel_token: Optional[CancellationToken] = None
    ) -> 'Future[BatchResult]':
        """
        Run the batch off the calling thread

        Args:
            records: Records to process (materialized before submission)
            executor: Executor to use; a single-thread executor is created if None
            cancel_token: Token the caller can use to stop between records

        Returns:
            Future resolving to the BatchResult
        """
        records = list(records)
        if executor is not None:
            return executor.submit(self.run, records, cancel_token)

        own_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fuzzy-batch")
        try:
            return own_executor.submit(self.run, records, cancel_token)
        finally:
            own_executor.shutdown(wait=False)
