"""
Shared fixtures: synthetic Pasilla-like counts and a backend-free fitter
"""

import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402
from scipy.stats import norm  # noqa: E402

from pasillaflow.config import Config  # noqa: E402
from pasillaflow.data import SampleDesign, build_design  # noqa: E402
from pasillaflow.differential import BaseFitter, FittedModel  # noqa: E402
from pasillaflow.differential.dataset import build_design_formula  # noqa: E402

SAMPLES = [
    "untreated1", "untreated2", "untreated3", "untreated4",
    "treated1", "treated2", "treated3", "treated4",
]
TREATMENTS = ["untreated"] * 4 + ["treated"] * 4
SEQUENCING = ["single-read", "single-read", "paired-end", "paired-end"] * 2

N_GENES = 60
N_UP = 6
N_DOWN = 6


def make_design_table(samples, treatments, sequencing) -> pd.DataFrame:
    return pd.DataFrame(
        {"Treatment": treatments, "Sequencing": sequencing},
        index=pd.Index(samples, name="sample"),
    )


def simulate_counts(seed: int = 7) -> pd.DataFrame:
    """Negative binomial counts, 6 genes up and 6 down 4-fold in treated samples"""
    rng = np.random.default_rng(seed)

    base = rng.lognormal(mean=6.0, sigma=1.0, size=N_GENES)
    fold = np.ones(N_GENES)
    fold[:N_UP] = 4.0
    fold[N_UP:N_UP + N_DOWN] = 0.25

    treated = np.array([t == "treated" for t in TREATMENTS])
    library = np.array([1.0, 1.2, 0.8, 1.1, 0.9, 1.3, 1.0, 0.85])

    mu = base[:, None] * library[None, :] * np.where(treated, fold[:, None], 1.0)
    dispersion = 0.05
    size = 1.0 / dispersion
    counts = rng.negative_binomial(size, size / (size + mu))

    return pd.DataFrame(
        counts,
        index=pd.Index([f"FBgn{i:07d}" for i in range(N_GENES)], name="gene_id"),
        columns=SAMPLES,
    )


class FakeFitter(BaseFitter):
    """
    Deterministic stand-in for the statistics backend

    Fold changes come from group means of total-count normalized counts and
    p-values from a normal approximation; good enough to drive result
    handling, export and charts without pyDESeq2.
    """

    name = "fake"

    def fit(self, counts: pd.DataFrame, design: SampleDesign) -> FittedModel:
        totals = counts.sum(axis=0)
        size_factors = totals / np.exp(np.log(totals).mean())
        normalized = counts / size_factors

        treated = (design.treatment == design.treated_level).to_numpy()
        mean_treated = normalized.loc[:, treated].mean(axis=1)
        mean_untreated = normalized.loc[:, ~treated].mean(axis=1)

        base_mean = normalized.mean(axis=1)
        lfc = np.log2((mean_treated + 1) / (mean_untreated + 1))
        lfc_se = pd.Series(0.25, index=counts.index)
        stat = lfc / lfc_se
        pvalue = pd.Series(2 * norm.sf(np.abs(stat)), index=counts.index)
        padj = np.minimum(pvalue * len(pvalue), 1.0)

        results = pd.DataFrame(
            {
                "baseMean": base_mean,
                "log2FoldChange": lfc,
                "lfcSE": lfc_se,
                "stat": stat,
                "pvalue": pvalue,
                "padj": padj,
            }
        )
        results.index.name = "gene_id"
        shrunken = results.assign(log2FoldChange=lfc * 0.9)

        genewise = 0.02 + 1.0 / (base_mean + 1)
        dispersions = pd.DataFrame(
            {
                "base_mean": base_mean,
                "genewise": genewise,
                "fitted": 0.02 + 0.8 / (base_mean + 1),
                "final": 0.02 + 0.9 / (base_mean + 1),
            }
        )

        return FittedModel(
            size_factors=size_factors.rename("size_factor"),
            normalized_counts=normalized,
            vst_counts=np.log2(normalized + 1),
            dispersions=dispersions,
            results=results,
            shrunken=shrunken,
            design_formula=build_design_formula(design),
            coefficient=f"treatment[T.{design.treated_level}]",
        )


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging replaces root handlers; put pytest's back afterwards"""
    root = logging.getLogger()
    package = logging.getLogger("pasillaflow")
    handlers, level, package_level = root.handlers[:], root.level, package.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    package.setLevel(package_level)


@pytest.fixture
def design_table() -> pd.DataFrame:
    return make_design_table(SAMPLES, TREATMENTS, SEQUENCING)


@pytest.fixture
def design(design_table) -> SampleDesign:
    return build_design(design_table)


@pytest.fixture
def counts() -> pd.DataFrame:
    return simulate_counts()


@pytest.fixture
def input_files(tmp_path, counts, design_table):
    """Counts and design written as CSV, count columns shuffled"""
    counts_path = tmp_path / "counts.csv"
    design_path = tmp_path / "design.csv"
    counts[SAMPLES[::-1]].to_csv(counts_path)
    design_table.to_csv(design_path)
    return counts_path, design_path


@pytest.fixture
def fake_fitter() -> FakeFitter:
    return FakeFitter()


@pytest.fixture
def fitted_model(counts, design, fake_fitter) -> FittedModel:
    return fake_fitter.fit(counts, design)


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(output_dir=str(tmp_path / "out"))


@pytest.fixture
def diff_result(config, counts, design, fake_fitter):
    from pasillaflow.differential import DifferentialAnalyzer

    analyzer = DifferentialAnalyzer(config, fitter=fake_fitter)
    return analyzer.run_differential_analysis(counts, design)
