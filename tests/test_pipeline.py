"""
Model fitting through pyDESeq2; skipped when the library is not installed
"""

import numpy as np
import pandas as pd
import pytest

pytest.importorskip("pydeseq2")

from pasillaflow import PasillaFlowAnalysis  # noqa: E402
from pasillaflow.config import Config  # noqa: E402
from pasillaflow.data import build_design  # noqa: E402
from pasillaflow.differential import DESeq2Fitter, RESULT_COLUMNS  # noqa: E402
from pasillaflow.exceptions import FitError  # noqa: E402

from conftest import SAMPLES, TREATMENTS, make_design_table  # noqa: E402

pytestmark = pytest.mark.filterwarnings("ignore")


@pytest.fixture
def toy():
    samples = ["untreated_se", "untreated_pe", "treated_se", "treated_pe"]
    design = build_design(
        make_design_table(
            samples,
            ["untreated", "untreated", "treated", "treated"],
            ["single", "paired", "single", "paired"],
        )
    )
    counts = pd.DataFrame(
        [
            [100, 130, 1050, 1300],
            [500, 560, 520, 540],
            [210, 260, 230, 245],
        ],
        index=pd.Index(["gene_up", "gene_flat1", "gene_flat2"], name="gene_id"),
        columns=samples,
    )
    return counts, design


def test_toy_dataset(toy):
    counts, design = toy
    model = DESeq2Fitter(shrink_lfc=False, vst=False).fit(counts, design)

    results = model.results
    assert list(results.columns) == RESULT_COLUMNS
    assert list(results.index) == list(counts.index)
    assert results.loc["gene_up", "log2FoldChange"] > 2
    assert results["pvalue"].idxmin() == "gene_up"
    assert model.coefficient == "treatment[T.treated]"
    assert model.design_formula == "~sequencing + treatment"
    assert model.normalized_counts.shape == counts.shape
    assert (model.size_factors > 0).all()


def test_swapping_baseline_negates_fold_changes(counts, design_table):
    fitter = DESeq2Fitter(shrink_lfc=False, vst=False)

    forward = fitter.fit(counts, build_design(design_table)).results
    swapped = fitter.fit(
        counts,
        build_design(design_table, reference_level="treated", treated_level="untreated"),
    ).results

    np.testing.assert_allclose(
        swapped["log2FoldChange"], -forward["log2FoldChange"], rtol=1e-3, atol=1e-4
    )
    np.testing.assert_allclose(swapped["pvalue"], forward["pvalue"], rtol=1e-2, atol=1e-8)


def test_confounded_design_raises_fit_error(counts):
    confounded = build_design(
        make_design_table(
            SAMPLES, TREATMENTS, ["single-read"] * 4 + ["paired-end"] * 4
        )
    )

    with pytest.raises(FitError):
        DESeq2Fitter(shrink_lfc=False, vst=False).fit(counts, confounded)


def test_full_model(counts, design):
    model = DESeq2Fitter().fit(counts, design)

    assert model.vst_counts.shape == counts.shape
    assert list(model.dispersions.columns) == ["base_mean", "genewise", "fitted", "final"]
    assert (model.dispersions["final"] > 0).all()
    assert list(model.shrunken.index) == list(model.results.index)
    assert np.isfinite(model.shrunken["log2FoldChange"]).all()

    up = [f"FBgn{i:07d}" for i in range(6)]
    assert (model.shrunken.loc[up, "log2FoldChange"] > 1).all()


def test_full_pipeline(tmp_path, input_files):
    counts_path, design_path = input_files
    config = Config(
        output_dir=str(tmp_path / "run"),
        counts_file=str(counts_path),
        design_file=str(design_path),
        visualization={"dpi": 40},
    )

    analysis = PasillaFlowAnalysis(config, log_level="WARNING")
    results = analysis.run_full_pipeline()

    result = results["differential_analysis"]
    up = {f"FBgn{i:07d}" for i in range(6)}
    assert up <= set(result.significant.index)
    assert set(result.top_genes) <= set(result.results_table.index)

    tables = tmp_path / "run" / "tables"
    for name in ["deseq2_results", "deseq2_significant", "normalized_counts",
                 "top_genes", "shrunken_lfc", "summary"]:
        assert (tables / f"pasilla_{name}.csv").exists()

    assert len(results["visualization"]) == 7
    assert set(analysis.get_execution_times()) == {
        "differential_analysis", "export", "visualization", "total"
    }
    summary = (tmp_path / "run" / "pipeline_summary.txt").read_text()
    assert "n_significant" in summary
