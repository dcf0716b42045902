import numpy as np
import pandas as pd
import pytest

from pasillaflow.differential import (
    filter_significant,
    label_direction,
    rank_results,
    summarize_results,
    top_genes,
)


@pytest.fixture
def results():
    return pd.DataFrame(
        {
            "baseMean": [100.0, 50.0, 300.0, 20.0, 80.0, 10.0],
            "log2FoldChange": [2.5, -1.5, 0.5, 1.0, -3.0, 4.0],
            "lfcSE": [0.3] * 6,
            "stat": [8.0, -5.0, 1.6, 3.3, -10.0, np.nan],
            "pvalue": [1e-5, 1e-3, 1e-3, 0.2, 1e-8, np.nan],
            "padj": [1e-4, 0.01, 0.01, 0.05, 1e-7, np.nan],
        },
        index=pd.Index(["gA", "gB", "gC", "gD", "gE", "gF"], name="gene_id"),
    )


def test_rank_results_stable_with_nan_last(results):
    ranked = rank_results(results)
    # gB and gC tie on p-value and keep their input order
    assert list(ranked.index) == ["gE", "gA", "gB", "gC", "gD", "gF"]


def test_rank_results_sorted_ascending(counts, design, fake_fitter):
    model = fake_fitter.fit(counts, design)
    pvalues = rank_results(model.results)["pvalue"].dropna()
    assert pvalues.is_monotonic_increasing


def test_filter_significant_is_subset_with_identical_values(results):
    significant = filter_significant(rank_results(results))

    assert list(significant.index) == ["gE", "gA", "gB"]
    pd.testing.assert_frame_equal(significant, results.loc[significant.index])
    assert (significant["padj"] < 0.05).all()
    assert (significant["log2FoldChange"].abs() > 1.0).all()


def test_filter_significant_thresholds_are_strict(results):
    # gD sits exactly on padj = 0.05 and |log2FC| = 1
    relaxed = filter_significant(results, padj_threshold=0.06, lfc_threshold=0.99)
    assert "gD" in relaxed.index
    assert "gD" not in filter_significant(results).index


def test_top_genes_ordered_by_padj(results):
    assert top_genes(results, n=3) == ["gE", "gA", "gB"]


@pytest.mark.parametrize("n_genes", [4, 10, 60])
def test_top_genes_length(fitted_model, n_genes):
    subset = fitted_model.results.iloc[:n_genes]
    assert len(top_genes(subset, n=10)) == min(10, n_genes)


def test_top_genes_nan_last(results):
    assert top_genes(results, n=10)[-1] == "gF"


def test_label_direction(results):
    labelled = label_direction(results)

    assert labelled["direction"].to_dict() == {
        "gA": "UP",
        "gB": "DOWN",
        "gC": "NO",
        "gD": "NO",
        "gE": "DOWN",
        "gF": "NO",
    }
    assert "direction" not in results.columns


def test_label_direction_custom_thresholds(results):
    labelled = label_direction(results, padj_threshold=0.1, lfc_threshold=0.1)
    assert labelled.loc["gC", "direction"] == "UP"
    assert labelled.loc["gD", "direction"] == "UP"


def test_summarize_results(results):
    stats = summarize_results(results)

    assert stats["n_tested"] == 6
    assert stats["n_significant"] == 3
    assert stats["n_up_regulated"] == 1
    assert stats["n_down_regulated"] == 2
    assert stats["min_padj"] == pytest.approx(1e-7)
    assert stats["max_abs_log2fc"] == pytest.approx(4.0)
