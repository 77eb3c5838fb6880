# Weather Data Module
from .frames import (
    records_from_frame,
    read_measurements_csv,
    results_to_frame,
    site_kinds_from_frame,
    ID_COLUMNS
)

__all__ = [
    'records_from_frame',
    'read_measurements_csv',
    'results_to_frame',
    'site_kinds_from_frame',
    'ID_COLUMNS'
]
