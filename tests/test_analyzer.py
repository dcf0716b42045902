import logging

import pandas as pd
import pytest

from pasillaflow.config import Config
from pasillaflow.differential import DifferentialAnalyzer, build_design_formula
from pasillaflow.data import build_design
from pasillaflow.exceptions import FitError, SchemaError

from conftest import SAMPLES, make_design_table


def test_run_differential_analysis(diff_result, counts):
    result = diff_result

    assert result.comparison_name == "treated_vs_untreated"
    assert result.method == "fake"
    assert result.n_input_genes == len(counts)
    assert result.n_tested == len(result.results_table)
    assert result.n_significant == len(result.significant)
    assert result.n_up_regulated + result.n_down_regulated == result.n_significant
    assert len(result.top_genes) == 10
    assert result.model.design_formula == "~sequencing + treatment"
    assert set(result.shrunken["direction"]) <= {"UP", "DOWN", "NO"}
    assert result.results_table["pvalue"].dropna().is_monotonic_increasing


def test_simulated_effects_are_recovered(diff_result):
    up = [f"FBgn{i:07d}" for i in range(6)]
    down = [f"FBgn{i:07d}" for i in range(6, 12)]
    directions = diff_result.shrunken["direction"]

    assert (directions.reindex(up) == "UP").all()
    assert (directions.reindex(down) == "DOWN").all()


def test_analyzer_loads_paths(config, input_files, fake_fitter):
    analyzer = DifferentialAnalyzer(config, fitter=fake_fitter)
    result = analyzer.run_differential_analysis(*input_files)
    assert list(result.model.normalized_counts.columns) == SAMPLES


def test_analyzer_rejects_mixed_inputs(config, input_files, design, fake_fitter):
    analyzer = DifferentialAnalyzer(config, fitter=fake_fitter)
    with pytest.raises(TypeError):
        analyzer.run_differential_analysis(input_files[0], design)


def test_nothing_passes_filter(config, counts, design, fake_fitter):
    analyzer = DifferentialAnalyzer(config, fitter=fake_fitter)
    with pytest.raises(FitError, match="filtering"):
        analyzer.run_differential_analysis(counts * 0, design)


def test_summary_has_no_timing(diff_result):
    summary = diff_result.summary()
    assert "execution_time" not in summary
    assert summary["comparison"] == "treated_vs_untreated"


def test_label_threshold_mismatch_warns(tmp_path, counts, design, fake_fitter, caplog):
    config = Config(
        output_dir=str(tmp_path),
        visualization={"volcano": {"logfc_threshold": 0.1, "padj_threshold": 0.1}},
    )
    analyzer = DifferentialAnalyzer(config, fitter=fake_fitter)

    with caplog.at_level(logging.WARNING):
        analyzer.run_differential_analysis(counts, design)

    assert "UP/DOWN labels use padj < 0.1" in caplog.text


def test_design_formula_drops_single_level_factor(caplog):
    table = make_design_table(
        ["u1", "u2", "t1", "t2"],
        ["untreated", "untreated", "treated", "treated"],
        ["paired"] * 4,
    )
    with caplog.at_level(logging.WARNING):
        formula = build_design_formula(build_design(table))

    assert formula == "~treatment"
    assert "sequencing" in caplog.text


def test_design_formula_needs_both_treatments():
    table = make_design_table(["u1", "u2"], ["untreated"] * 2, ["single", "paired"])
    with pytest.raises(SchemaError, match="both treatment levels"):
        build_design_formula(build_design(table))


def test_save_results_records_paths(tmp_path, config, diff_result, fake_fitter):
    analyzer = DifferentialAnalyzer(config, fitter=fake_fitter)
    paths = analyzer.save_results(diff_result, tmp_path / "tables")

    assert diff_result.output_files == paths
    assert all(path.exists() for path in paths.values())
    top = pd.read_csv(paths["top_genes"], index_col=0)
    assert list(top.index) == diff_result.top_genes
