"""
Statistical backends for differential expression

The negative-binomial GLM, dispersion shrinkage, Wald test, variance
stabilizing transform and fold change shrinkage all come from pyDESeq2.
This module only wires the calls together and converts the library's
AnnData-shaped output into plain genes x samples DataFrames.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np
import pandas as pd

from ..data import SampleDesign
from ..exceptions import FitError
from ..utils import log_execution_time
from .dataset import build_dataset, build_design_formula, treatment_coefficient
from .models import RESULT_COLUMNS, FittedModel

logger = logging.getLogger(__name__)


class BaseFitter(ABC):
    """Base class for differential expression backends"""

    name = "base"

    @abstractmethod
    def fit(self, counts: pd.DataFrame, design: SampleDesign) -> FittedModel:
        """Fit the model on a filtered genes x samples count matrix"""

    @staticmethod
    def _run(stage: str, func, *args, **kwargs):
        """Call into the backend, reporting any failure as a FitError"""
        logger.debug(f"Running {stage}")
        try:
            return func(*args, **kwargs)
        except FitError:
            raise
        except Exception as e:
            raise FitError(f"{type(e).__name__}: {e}", stage=stage) from e


class DESeq2Fitter(BaseFitter):
    """pyDESeq2-based negative binomial GLM with Wald testing"""

    name = "DESeq2"

    def __init__(
        self,
        alpha: float = 0.05,
        n_cpus: int = 1,
        refit_cooks: bool = True,
        shrink_lfc: bool = True,
        vst: bool = True,
        quiet: bool = True,
    ):
        self.alpha = alpha
        self.n_cpus = n_cpus
        self.refit_cooks = refit_cooks
        self.shrink_lfc = shrink_lfc
        self.vst = vst
        self.quiet = quiet

    @log_execution_time
    def fit(self, counts: pd.DataFrame, design: SampleDesign) -> FittedModel:
        from pydeseq2.default_inference import DefaultInference
        from pydeseq2.ds import DeseqStats

        if counts.empty:
            raise FitError("no genes left to fit", stage="dataset construction")

        genes = counts.index
        samples = list(counts.columns)
        formula = build_design_formula(design)
        inference = DefaultInference(n_cpus=self.n_cpus)

        dds = build_dataset(
            counts,
            design,
            formula=formula,
            refit_cooks=self.refit_cooks,
            inference=inference,
            quiet=self.quiet,
        )
        coefficient = treatment_coefficient(dds, design)

        logger.info("Estimating size factors, dispersions and fitting GLM")
        self._run("dispersion and GLM fitting", dds.deseq2)

        size_factors = pd.Series(
            np.asarray(self._size_factors(dds), dtype=float),
            index=samples,
            name="size_factor",
        )
        normalized = pd.DataFrame(
            np.asarray(dds.layers["normed_counts"]).T, index=genes, columns=samples
        )
        dispersions = pd.DataFrame(
            {
                "base_mean": normalized.mean(axis=1),
                "genewise": np.asarray(dds.var["genewise_dispersions"], dtype=float),
                "fitted": np.asarray(dds.var["fitted_dispersions"], dtype=float),
                "final": np.asarray(dds.var["dispersions"], dtype=float),
            },
            index=genes,
        )

        logger.info(
            f"Wald test: treatment {design.treated_level} vs {design.reference_level}"
        )
        stats = self._run(
            "Wald test",
            DeseqStats,
            dds,
            contrast=["treatment", design.treated_level, design.reference_level],
            alpha=self.alpha,
            inference=inference,
            quiet=self.quiet,
        )
        self._run("Wald test", stats.summary)
        results = self._results_table(stats.results_df, genes)

        if self.shrink_lfc:
            logger.info(f"Shrinking log2 fold changes on {coefficient}")
            self._run("LFC shrinkage", stats.lfc_shrink, coeff=coefficient)
            shrunken = self._results_table(stats.results_df, genes)
        else:
            shrunken = results.copy()

        if self.vst:
            logger.info("Applying variance stabilizing transform")
            self._run("variance stabilization", dds.vst, use_design=False)
            vst_counts = pd.DataFrame(
                np.asarray(dds.layers["vst_counts"]).T, index=genes, columns=samples
            )
        else:
            vst_counts = np.log2(normalized + 1)

        return FittedModel(
            size_factors=size_factors,
            normalized_counts=normalized,
            vst_counts=vst_counts,
            dispersions=dispersions,
            results=results,
            shrunken=shrunken,
            design_formula=formula,
            coefficient=coefficient,
        )

    @staticmethod
    def _size_factors(dds):
        # pyDESeq2 moved size factors from obsm to obs
        if "size_factors" in dds.obs.columns:
            return dds.obs["size_factors"]
        return dds.obsm["size_factors"]

    @staticmethod
    def _results_table(results_df: pd.DataFrame, genes: pd.Index) -> pd.DataFrame:
        missing = [col for col in RESULT_COLUMNS if col not in results_df.columns]
        if missing:
            raise FitError(f"backend results lack columns {missing}", stage="Wald test")

        table = results_df.loc[:, RESULT_COLUMNS].astype(float).reindex(genes)
        table.index.name = "gene_id"
        return table
