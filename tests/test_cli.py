import pytest
import yaml
from click.testing import CliRunner

from pasillaflow.cli import main


@pytest.fixture
def runner():
    return CliRunner()


def test_info(runner):
    result = runner.invoke(main, ["-q", "info"])

    assert result.exit_code == 0
    assert "PasillaFlow v" in result.output
    assert "pydeseq2" in result.output


def test_init_and_validate_config(runner, tmp_path):
    path = tmp_path / "config.yaml"

    result = runner.invoke(main, ["-q", "init-config", str(path)])
    assert result.exit_code == 0
    assert yaml.safe_load(path.read_text())["differential"]["min_count"] == 10

    result = runner.invoke(main, ["-q", "validate-config", str(path)])
    assert result.exit_code == 0
    assert "Configuration is valid" in result.output


def test_init_config_json(runner, tmp_path):
    path = tmp_path / "config.json"
    result = runner.invoke(main, ["-q", "init-config", str(path), "--format", "json"])

    assert result.exit_code == 0
    assert path.read_text().lstrip().startswith("{")


def test_init_config_keeps_existing_file(runner, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("project_name: mine\n")

    result = runner.invoke(main, ["-q", "init-config", str(path)], input="n\n")

    assert "cancelled" in result.output
    assert path.read_text() == "project_name: mine\n"


def test_validate_config_with_issues(runner, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("differential:\n  fdr_threshold: 2.0\n")

    result = runner.invoke(main, ["-q", "validate-config", str(path)])

    assert result.exit_code == 1
    assert "fdr_threshold" in result.output


def test_bad_global_config(runner, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("not_a_setting: 1\n")

    result = runner.invoke(main, ["-q", "-c", str(path), "info"])
    assert result.exit_code == 1


def test_differential_missing_counts(runner, tmp_path, input_files):
    _, design_path = input_files
    result = runner.invoke(
        main,
        [
            "-q",
            "differential",
            "--counts", str(tmp_path / "missing.csv"),
            "--design", str(design_path),
            "-o", str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 1
    assert "count matrix not found" in result.output


def test_differential_without_inputs(runner, tmp_path):
    result = runner.invoke(main, ["-q", "differential", "-o", str(tmp_path)])
    assert result.exit_code == 1


def test_run_end_to_end(runner, tmp_path, input_files):
    pytest.importorskip("pydeseq2")

    counts_path, design_path = input_files
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump({"visualization": {"dpi": 40}}))
    output = tmp_path / "results"

    result = runner.invoke(
        main,
        [
            "-q",
            "-c", str(config_path),
            "run",
            "--counts", str(counts_path),
            "--design", str(design_path),
            "-o", str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "treated_vs_untreated" in result.output
    assert (output / "tables" / "pasilla_deseq2_results.csv").exists()
    assert (output / "figures" / "volcano.png").exists()
    assert (output / "pipeline_summary.txt").exists()


def test_validate_config_missing_input_file(runner, tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"counts_file": str(tmp_path / "absent.csv")}))

    result = runner.invoke(main, ["-q", "validate-config", str(path)])

    assert result.exit_code == 1
    assert "Count matrix not found" in result.output


def test_log_file_option(runner, tmp_path):
    log_path = tmp_path / "logs" / "run.log"
    result = runner.invoke(
        main, ["--log-file", str(log_path), "differential", "-o", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert "Initializing PasillaFlow analysis pipeline" in log_path.read_text()
