# Batch Processing Module
from .records import (
    BatchRecordResult,
    SkippedRecord,
    BatchResult,
    BatchProgress,
    CancellationToken
)
from .processor import (
    BatchProcessor,
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_CHUNK_SIZE
)

__all__ = [
    'BatchRecordResult',
    'SkippedRecord',
    'BatchResult',
    'BatchProgress',
    'CancellationToken',
    'BatchProcessor',
    'DEFAULT_PROGRESS_INTERVAL',
    'DEFAULT_CHUNK_SIZE'
]
