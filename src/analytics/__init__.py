# Analytics Module
from .uhi import (
    UHIResult,
    compute_uhi_intensity,
    split_by_site_kind
)

__all__ = [
    'UHIResult',
    'compute_uhi_intensity',
    'split_by_site_kind'
]
