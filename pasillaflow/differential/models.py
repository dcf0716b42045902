"""
Data containers for a fitted differential expression model
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

RESULT_COLUMNS = ["baseMean", "log2FoldChange", "lfcSE", "stat", "pvalue", "padj"]
DISPERSION_COLUMNS = ["base_mean", "genewise", "fitted", "final"]


@dataclass(frozen=True)
class FittedModel:
    """
    Read-only view of everything the statistics backend produced

    All gene x sample frames share the same gene index (the genes that
    survived the count filter) and the design's sample order.

    Attributes:
        size_factors: per-sample library size factors
        normalized_counts: counts divided by size factors (genes x samples)
        vst_counts: variance-stabilized counts (genes x samples)
        dispersions: per-gene base mean, gene-wise, trend and final dispersion
        results: Wald test table, one row per gene, columns RESULT_COLUMNS
        shrunken: results with shrunken log2 fold changes
        design_formula: formula the model was fitted with
        coefficient: design-matrix column of the treated vs untreated effect
    """

    size_factors: pd.Series
    normalized_counts: pd.DataFrame
    vst_counts: pd.DataFrame
    dispersions: pd.DataFrame
    results: pd.DataFrame
    shrunken: pd.DataFrame
    design_formula: str
    coefficient: str

    @property
    def log_counts(self) -> pd.DataFrame:
        """log2(normalized count + 1), the shifted log transform"""
        return np.log2(self.normalized_counts + 1)

    @property
    def genes(self) -> pd.Index:
        return self.results.index
