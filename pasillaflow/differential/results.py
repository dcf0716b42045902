"""
Ranking, significance filtering and export of differential expression results

The ranked table, the significance-filtered table and the top-gene list are
three independent views of the same Wald test table.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Union

import numpy as np
import pandas as pd

from ..utils import create_output_directory, safe_file_operation

if TYPE_CHECKING:
    from .analyzer import DifferentialResult

logger = logging.getLogger(__name__)

DIRECTION_UP = "UP"
DIRECTION_DOWN = "DOWN"
DIRECTION_NONE = "NO"

FLOAT_FORMAT = "%.10g"


def rank_results(results: pd.DataFrame) -> pd.DataFrame:
    """Stable ascending sort by p-value, missing p-values last"""
    return results.sort_values(
        "pvalue", ascending=True, kind="mergesort", na_position="last"
    )


def filter_significant(
    results: pd.DataFrame,
    padj_threshold: float = 0.05,
    lfc_threshold: float = 1.0,
) -> pd.DataFrame:
    """Rows with adjusted p-value below and |log2 fold change| above the thresholds"""
    mask = (results["padj"] < padj_threshold) & (
        results["log2FoldChange"].abs() > lfc_threshold
    )
    return results.loc[mask]


def top_genes(results: pd.DataFrame, n: int = 10) -> List[str]:
    """The ``n`` genes with the smallest adjusted p-value (stable, NaN last)"""
    ordered = results.sort_values(
        "padj", ascending=True, kind="mergesort", na_position="last"
    )
    return list(ordered.index[:n])


def label_direction(
    results: pd.DataFrame,
    padj_threshold: float = 0.05,
    lfc_threshold: float = 1.0,
) -> pd.DataFrame:
    """Copy of ``results`` with a ``direction`` column: UP, DOWN or NO"""
    labelled = results.copy()
    significant = labelled["padj"] < padj_threshold
    lfc = labelled["log2FoldChange"]

    labelled["direction"] = np.select(
        [significant & (lfc > lfc_threshold), significant & (lfc < -lfc_threshold)],
        [DIRECTION_UP, DIRECTION_DOWN],
        default=DIRECTION_NONE,
    )
    return labelled


def summarize_results(
    results: pd.DataFrame,
    padj_threshold: float = 0.05,
    lfc_threshold: float = 1.0,
) -> Dict[str, Any]:
    """Counts of tested / significant / up / down genes"""
    significant = filter_significant(results, padj_threshold, lfc_threshold)
    n_up = int((significant["log2FoldChange"] > 0).sum())
    n_down = int((significant["log2FoldChange"] < 0).sum())

    return {
        "n_tested": int(len(results)),
        "n_significant": n_up + n_down,
        "n_up_regulated": n_up,
        "n_down_regulated": n_down,
        "min_padj": float(results["padj"].min()) if len(results) else None,
        "max_abs_log2fc": (
            float(results["log2FoldChange"].abs().max()) if len(results) else None
        ),
    }


def write_table(table: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write a table as CSV with a fixed float format and line terminator"""
    path = Path(path)
    with safe_file_operation(path):
        table.to_csv(path, float_format=FLOAT_FORMAT, lineterminator="\n")
    return path


def export_results(
    result: "DifferentialResult",
    output_dir: Union[str, Path],
    prefix: str = "pasilla",
) -> Dict[str, Path]:
    """
    Write every result table of a run to ``output_dir``

    Re-running on the same inputs overwrites each file with identical bytes.

    Returns:
        Mapping of artifact name to written path
    """
    output_dir = create_output_directory(output_dir)

    top = pd.DataFrame(
        {"rank": np.arange(1, len(result.top_genes) + 1)},
        index=pd.Index(result.top_genes, name="gene_id"),
    )
    summary = pd.DataFrame([result.summary()]).set_index("comparison")

    tables = {
        "results": (result.results_table, f"{prefix}_deseq2_results.csv"),
        "significant": (result.significant, f"{prefix}_deseq2_significant.csv"),
        "normalized_counts": (
            result.model.normalized_counts,
            f"{prefix}_normalized_counts.csv",
        ),
        "top_genes": (top, f"{prefix}_top_genes.csv"),
        "shrunken": (result.shrunken, f"{prefix}_shrunken_lfc.csv"),
        "summary": (summary, f"{prefix}_summary.csv"),
    }

    output_files = {}
    for name, (table, filename) in tables.items():
        output_files[name] = write_table(table, output_dir / filename)

    logger.info(f"Results saved: {len(output_files)} files in {output_dir}")
    return output_files
