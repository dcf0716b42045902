"""
Differential expression module for PasillaFlow

Builds the treated vs untreated negative binomial model through pyDESeq2,
filters low-count genes, ranks and filters results and exports them.
"""

from .analyzer import DifferentialAnalyzer, DifferentialResult
from .dataset import build_dataset, build_design_formula, treatment_coefficient
from .filtering import expressed_mask, filter_low_counts, min_group_size
from .methods import BaseFitter, DESeq2Fitter
from .models import RESULT_COLUMNS, FittedModel
from .results import (
    DIRECTION_DOWN,
    DIRECTION_NONE,
    DIRECTION_UP,
    export_results,
    filter_significant,
    label_direction,
    rank_results,
    summarize_results,
    top_genes,
    write_table,
)

__all__ = [
    "DifferentialAnalyzer",
    "DifferentialResult",
    "BaseFitter",
    "DESeq2Fitter",
    "FittedModel",
    "RESULT_COLUMNS",
    "build_dataset",
    "build_design_formula",
    "treatment_coefficient",
    "expressed_mask",
    "filter_low_counts",
    "min_group_size",
    "rank_results",
    "filter_significant",
    "top_genes",
    "label_direction",
    "summarize_results",
    "export_results",
    "write_table",
    "DIRECTION_UP",
    "DIRECTION_DOWN",
    "DIRECTION_NONE",
]
