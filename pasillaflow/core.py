"""
Core PasillaFlow analysis orchestrator
"""

import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import Config, PathConfig, load_config, validate_config
from .data import SampleDesign
from .differential import DifferentialAnalyzer, DifferentialResult
from .exceptions import ConfigError
from .utils import (
    get_logger,
    safe_file_operation,
    setup_logging,
    validate_environment,
    validate_input_files,
)
from .visualization import PlotStyle, render_all

logger = get_logger(__name__)

PIPELINE_STEPS = ["differential_analysis", "export", "visualization"]


class PasillaFlowAnalysis:
    """
    Main orchestrator for the Pasilla differential expression pipeline

    Runs ingestion and model fitting, exports the result tables and renders
    the charts. Any failure is logged and re-raised; there is no partial run.
    """

    def __init__(
        self,
        config: Union[str, Path, Config, Dict[str, Any]],
        log_level: str = "INFO",
        log_file: Optional[Union[str, Path]] = None,
        setup_logs: bool = True,
    ):
        """
        Initialize PasillaFlow analysis

        Args:
            config: Configuration file path, Config object, or config dict
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: Optional log file path; defaults to ``config.log_file``
            setup_logs: Configure the root logger (off when the CLI already has)
        """
        if isinstance(config, (str, Path)):
            config = load_config(config)
        elif isinstance(config, dict):
            try:
                config = Config(**config)
            except TypeError as e:
                raise ConfigError(f"Invalid configuration: {e}") from e
        elif not isinstance(config, Config):
            raise ValueError(
                "Invalid config type. Expected str, Path, dict, or Config object"
            )
        self.config = config

        if setup_logs:
            setup_logging(level=log_level, log_file=log_file or config.log_file)
        logger.info("Initializing PasillaFlow analysis pipeline")

        self.paths = PathConfig.from_config(self.config)
        self.style = PlotStyle.from_config(self.config)

        self._validate_environment()

        self.differential_analyzer = DifferentialAnalyzer(self.config)

        self.design: Optional[SampleDesign] = None
        self.results: Dict[str, Any] = {}
        self.execution_times: Dict[str, float] = {}

        logger.info("PasillaFlow pipeline initialized successfully")

    def _validate_environment(self) -> None:
        """Log configuration and environment issues, create output directories"""
        logger.info("Validating environment...")

        issues = (
            validate_config(self.config)
            + validate_input_files(self.config)
            + self.paths.validate()
        )
        if issues:
            logger.warning("Configuration issues found:")
            for issue in issues:
                logger.warning(f"  - {issue}")

        validate_environment()
        self.paths.create_output_dirs()

    def run_full_pipeline(
        self,
        counts: Optional[Union[str, Path]] = None,
        design: Optional[Union[str, Path]] = None,
        steps: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Run the complete PasillaFlow analysis pipeline

        Args:
            counts: Count matrix path; defaults to ``config.counts_file``
            design: Design table path; defaults to ``config.design_file``
            steps: Subset of PIPELINE_STEPS to run, in order

        Returns:
            Dictionary of step name to step result
        """
        logger.info("=" * 60)
        logger.info("Starting PasillaFlow analysis pipeline")
        logger.info("=" * 60)

        start_time = time.time()
        steps = list(steps or PIPELINE_STEPS)
        unknown = [step for step in steps if step not in PIPELINE_STEPS]
        if unknown:
            raise ValueError(f"Unknown pipeline steps: {unknown}")

        for step in steps:
            step_start = time.time()
            logger.info(f"{'=' * 20} STEP: {step.upper()} {'=' * 20}")

            try:
                if step == "differential_analysis":
                    self.results[step] = self.run_differential_analysis(counts, design)
                elif step == "export":
                    self.results[step] = self.run_export()
                elif step == "visualization":
                    self.results[step] = self.run_visualization()
            except Exception as e:
                logger.error(f"Step {step} failed: {e}")
                raise

            step_time = time.time() - step_start
            self.execution_times[step] = step_time
            logger.info(f"Step {step} completed in {step_time:.2f} seconds")

        total_time = time.time() - start_time
        self.execution_times["total"] = total_time

        self._create_pipeline_summary()

        logger.info("=" * 60)
        logger.info(f"PasillaFlow pipeline completed in {total_time:.2f} seconds")
        logger.info("=" * 60)

        return self.results

    def run_differential_analysis(
        self,
        counts: Optional[Union[str, Path]] = None,
        design: Optional[Union[str, Path]] = None,
    ) -> DifferentialResult:
        """Load the inputs and fit the treated vs untreated model"""
        counts = counts or self.config.counts_file
        design = design or self.config.design_file
        if counts is None or design is None:
            raise ValueError("A count matrix and a design table are required")

        counts, self.design = self.differential_analyzer.load(
            self.config.resolve_input(counts), self.config.resolve_input(design)
        )
        return self.differential_analyzer.run_differential_analysis(counts, self.design)

    def run_export(self) -> Dict[str, Path]:
        """Write the result tables to ``<output_dir>/tables``"""
        result = self._require_differential("export")
        return self.differential_analyzer.save_results(result, self.paths.tables_dir)

    def run_visualization(self) -> Dict[str, List[Path]]:
        """Render every chart to ``<output_dir>/figures``"""
        result = self._require_differential("visualization")
        vis = self.config.visualization
        return render_all(
            result,
            self.design,
            self.paths.figures_dir,
            style=self.style,
            n_jobs=vis["n_jobs"],
            pca_top_genes=vis["pca_top_genes"],
            volcano=vis["volcano"],
            random_state=self.config.random_seed,
        )

    def _require_differential(self, step: str) -> DifferentialResult:
        if "differential_analysis" not in self.results:
            raise RuntimeError(f"Differential analysis must be run before {step}")
        return self.results["differential_analysis"]

    def _create_pipeline_summary(self) -> None:
        """Log the run summary and write it to pipeline_summary.txt"""
        lines = [
            "PasillaFlow Pipeline Summary",
            "=" * 30,
            "",
            "Configuration:",
            f"  Project: {self.config.project_name}",
            f"  Output directory: {self.paths.output_dir}",
            "",
            "Execution Times:",
        ]
        for step, exec_time in self.execution_times.items():
            lines.append(f"  {step}: {exec_time:.2f} seconds")

        result = self.results.get("differential_analysis")
        if result is not None:
            lines.extend(["", "Results:"])
            for key, value in result.summary().items():
                lines.append(f"  {key}: {value}")

        for line in lines:
            logger.info(line)

        summary_file = self.paths.output_dir / "pipeline_summary.txt"
        with safe_file_operation(summary_file), open(summary_file, "w") as f:
            f.write("\n".join(lines) + "\n")

        logger.info(f"Pipeline summary saved to: {summary_file}")

    def get_results(self) -> Dict[str, Any]:
        """Get all pipeline results"""
        return self.results

    def get_execution_times(self) -> Dict[str, float]:
        """Get execution times for all steps"""
        return self.execution_times
