"""
Main differential expression coordinator
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd

from ..config import Config
from ..data import SampleDesign, align_samples, load_inputs
from ..exceptions import FitError
from .filtering import filter_low_counts
from .methods import BaseFitter, DESeq2Fitter
from .models import FittedModel
from .results import (
    export_results,
    filter_significant,
    label_direction,
    rank_results,
    summarize_results,
    top_genes,
)

logger = logging.getLogger(__name__)


@dataclass
class DifferentialResult:
    """Result of one treated vs untreated differential expression run"""

    comparison_name: str
    method: str
    model: FittedModel

    # Derived views
    results_table: pd.DataFrame
    significant: pd.DataFrame
    top_genes: List[str]
    shrunken: pd.DataFrame

    # Statistics
    n_input_genes: int = 0
    n_tested: int = 0
    n_significant: int = 0
    n_up_regulated: int = 0
    n_down_regulated: int = 0
    min_padj: Optional[float] = None
    max_abs_log2fc: Optional[float] = None

    # Thresholds
    fdr_threshold: float = 0.05
    logfc_threshold: float = 1.0

    # Files and execution info
    output_files: Dict[str, Path] = field(default_factory=dict)
    execution_time: Optional[float] = None

    def summary(self) -> Dict[str, Any]:
        """Deterministic run statistics (no timings), one row of the summary table"""
        return {
            "comparison": self.comparison_name,
            "method": self.method,
            "design": self.model.design_formula,
            "n_input_genes": self.n_input_genes,
            "n_tested": self.n_tested,
            "n_significant": self.n_significant,
            "n_up_regulated": self.n_up_regulated,
            "n_down_regulated": self.n_down_regulated,
            "min_padj": self.min_padj,
            "max_abs_log2fc": self.max_abs_log2fc,
            "fdr_threshold": self.fdr_threshold,
            "logfc_threshold": self.logfc_threshold,
        }


class DifferentialAnalyzer:
    """Filter, fit, rank and export one treated vs untreated comparison"""

    def __init__(self, config: Config, fitter: Optional[BaseFitter] = None):
        self.config = config
        self.diff_params = config.differential
        self.input_params = config.input
        self.volcano_params = config.visualization["volcano"]

        if fitter is None:
            fitter = DESeq2Fitter(
                alpha=self.diff_params["fdr_threshold"],
                n_cpus=config.n_threads,
                refit_cooks=self.diff_params["refit_cooks"],
                shrink_lfc=self.diff_params["shrink_lfc"],
                vst=self.diff_params["vst"],
            )
        self.fitter = fitter

    def load(
        self,
        counts: Union[str, Path, pd.DataFrame],
        design: Union[str, Path, SampleDesign],
    ) -> Tuple[pd.DataFrame, SampleDesign]:
        """Accept paths or already-loaded inputs and return them aligned"""
        if isinstance(counts, pd.DataFrame) and isinstance(design, SampleDesign):
            return align_samples(counts, design), design

        if isinstance(counts, pd.DataFrame) or isinstance(design, SampleDesign):
            raise TypeError("counts and design must both be paths or both be loaded")

        return load_inputs(
            counts,
            design,
            sep=self.input_params["sep"],
            treatment_column=self.input_params["treatment_column"],
            sequencing_column=self.input_params["sequencing_column"],
            reference_level=self.input_params["reference_level"],
            treated_level=self.input_params["treated_level"],
        )

    def run_differential_analysis(
        self,
        counts: Union[str, Path, pd.DataFrame],
        design: Union[str, Path, SampleDesign],
    ) -> DifferentialResult:
        """
        Run the count filter, model fit and result views

        Args:
            counts: Count matrix CSV path or genes x samples DataFrame
            design: Design table CSV path or SampleDesign

        Returns:
            DifferentialResult with ranked, filtered and shrunken tables
        """
        start_time = time.time()
        counts, design = self.load(counts, design)

        comparison_name = f"{design.treated_level}_vs_{design.reference_level}"
        logger.info(f"Starting differential expression analysis: {comparison_name}")

        filtered = filter_low_counts(
            counts, design, min_count=self.diff_params["min_count"]
        )
        if filtered.empty:
            raise FitError(
                f"no gene passed the count filter (> {self.diff_params['min_count']} "
                f"in >= {design.min_group_size()} samples)",
                stage="filtering",
            )

        model = self.fitter.fit(filtered, design)

        fdr = self.diff_params["fdr_threshold"]
        lfc = self.diff_params["logfc_threshold"]

        ranked = rank_results(model.results)
        significant = filter_significant(ranked, padj_threshold=fdr, lfc_threshold=lfc)
        top = top_genes(model.results, n=int(self.diff_params["top_n"]))
        shrunken = label_direction(
            rank_results(model.shrunken),
            padj_threshold=self.volcano_params["padj_threshold"],
            lfc_threshold=self.volcano_params["logfc_threshold"],
        )
        self._check_label_thresholds(fdr, lfc)

        stats = summarize_results(model.results, padj_threshold=fdr, lfc_threshold=lfc)

        result = DifferentialResult(
            comparison_name=comparison_name,
            method=self.fitter.name,
            model=model,
            results_table=ranked,
            significant=significant,
            top_genes=top,
            shrunken=shrunken,
            n_input_genes=len(counts),
            fdr_threshold=fdr,
            logfc_threshold=lfc,
            execution_time=time.time() - start_time,
            **stats,
        )

        logger.info(
            f"{result.method} completed: {result.n_significant} significant genes "
            f"({result.n_up_regulated} up, {result.n_down_regulated} down) "
            f"of {result.n_tested} tested"
        )
        return result

    def save_results(
        self, result: DifferentialResult, output_dir: Union[str, Path]
    ) -> Dict[str, Path]:
        """Export the result tables and record their paths on ``result``"""
        output_files = export_results(
            result, output_dir, prefix=self.diff_params["output_prefix"]
        )
        result.output_files.update(output_files)
        return output_files

    def _check_label_thresholds(self, fdr: float, lfc: float) -> None:
        volcano_fdr = self.volcano_params["padj_threshold"]
        volcano_lfc = self.volcano_params["logfc_threshold"]
        if (volcano_fdr, volcano_lfc) != (fdr, lfc):
            logger.warning(
                f"UP/DOWN labels use padj < {volcano_fdr}, |log2FC| > {volcano_lfc} "
                f"but the significance filter uses padj < {fdr}, |log2FC| > {lfc}"
            )
