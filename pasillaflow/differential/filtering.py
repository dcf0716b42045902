"""
Low-count gene filtering
"""

import logging

import pandas as pd

from ..data import SampleDesign

logger = logging.getLogger(__name__)


def min_group_size(design: SampleDesign) -> int:
    """Size of the smaller treatment group"""
    return design.min_group_size()


def expressed_mask(
    counts: pd.DataFrame, min_count: int = 10, min_samples: int = 1
) -> pd.Series:
    """True for genes whose count exceeds ``min_count`` in at least ``min_samples`` samples"""
    return (counts > min_count).sum(axis=1) >= min_samples


def filter_low_counts(
    counts: pd.DataFrame, design: SampleDesign, min_count: int = 10
) -> pd.DataFrame:
    """
    Drop genes with too little signal for stable dispersion estimates

    A gene is kept when its raw count exceeds ``min_count`` in at least as
    many samples as the smaller treatment group contains. Row order is kept.
    """
    min_samples = min_group_size(design)
    keep = expressed_mask(counts, min_count=min_count, min_samples=min_samples)

    filtered = counts.loc[keep]
    logger.info(
        f"Count filter (> {min_count} in >= {min_samples} samples): kept "
        f"{len(filtered)} of {len(counts)} genes, removed {len(counts) - len(filtered)}"
    )
    return filtered
