"""
Urban Heat Island Intensity

UHI intensity from apparent temperature results, split into urban and rural
sites. Works on typed (identifier, value) records so no display strings are
re-parsed.
"""
from dataclasses import dataclass
from typing import Hashable, Iterable, List, Mapping, Optional, Tuple, Union
import logging
import math

import numpy as np

from src.batch.records import BatchResult

logger = logging.getLogger(__name__)

URBAN = "urban"
RURAL = "rural"

METHODS = ("max_min", "mean_difference")


@dataclass(frozen=True)
class UHIResult:
    """UHI intensity and the number of sites behind it"""
    intensity: float
    method: str
    urban_count: int
    rural_count: int

    @property
    def is_defined(self) -> bool:
        return not math.isnan(self.intensity)


def split_by_site_kind(
    records: Iterable[Tuple[Hashable, Optional[float]]],
    site_kinds: Mapping[Hashable, str]
) -> Tuple[List[float], List[float]]:
    """
    Partition defined values into urban and rural lists

    Records with an undefined value (None/NaN) or a missing or blank site kind
    are dropped.
    """
    urban, rural = [], []
    for identifier, value in records:
        if value is None or math.isnan(value):
            continue
        kind = (site_kinds.get(identifier) or "").strip().lower()
        if not kind:
            logger.debug(f"No site kind for {identifier!r}, ignoring")
            continue

        if kind == URBAN:
            urban.append(float(value))
        elif kind == RURAL:
            rural.append(float(value))
        else:
            raise ValueError(f"Unknown site kind '{kind}' for {identifier!r}, expected 'urban' or 'rural'")

    return urban, rural


def compute_uhi_intensity(
    records: Union[BatchResult, Iterable[Tuple[Hashable, Optional[float]]]],
    site_kinds: Mapping[Hashable, str],
    method: str = "max_min"
) -> UHIResult:
    """
    Compute UHI intensity

    Args:
        records: BatchResult or (identifier, value) pairs
        site_kinds: identifier -> "urban" | "rural"
        method: "max_min" (warmest urban minus coolest rural) or
            "mean_difference" (mean urban minus mean rural)

    Returns:
        UHIResult; intensity is NaN when either group has no defined value
    """
    if method not in METHODS:
        raise ValueError(f"Unknown UHI method '{method}', expected one of {METHODS}")

    if isinstance(records, BatchResult):
        records = records.as_pairs()

    urban, rural = split_by_site_kind(records, site_kinds)

    if not urban or not rural:
        logger.warning(
            f"Cannot compute UHI intensity: {len(urban)} urban and {len(rural)} rural values"
        )
        return UHIResult(math.nan, method, len(urban), len(rural))

    if method == "max_min":
        intensity = max(urban) - min(rural)
    else:
        intensity = float(np.mean(urban) - np.mean(rural))

    logger.info(f"UHI intensity ({method}): {intensity:.2f} from {len(urban)} urban / {len(rural)} rural sites")
    return UHIResult(float(intensity), method, len(urban), len(rural))
