"""
Core configuration management for PasillaFlow
"""

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Main configuration class for a PasillaFlow run"""

    # General settings
    project_name: str = "pasilla"
    random_seed: int = 42
    n_threads: int = 1

    # Input/Output paths
    input_dir: Optional[str] = None
    output_dir: Optional[str] = "pasillaflow_output"
    counts_file: Optional[str] = None
    design_file: Optional[str] = None
    log_file: Optional[str] = None

    # Analysis parameters
    input: Dict[str, Any] = field(default_factory=dict)
    differential: Dict[str, Any] = field(default_factory=dict)
    visualization: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Fill every section with defaults, keeping user-supplied keys"""
        visualization = self.visualization or {}
        defaults = self._get_default_visualization()

        self._check_keys("input", self.input, self._get_default_input())
        self._check_keys(
            "differential", self.differential, self._get_default_differential()
        )
        self._check_keys("visualization", visualization, defaults)
        self._check_keys(
            "visualization.volcano",
            visualization.get("volcano"),
            defaults["volcano"],
        )

        self.input = {**self._get_default_input(), **(self.input or {})}
        self.differential = {
            **self._get_default_differential(),
            **(self.differential or {}),
        }

        volcano = {**defaults["volcano"], **(visualization.get("volcano") or {})}
        self.visualization = {**defaults, **visualization, "volcano": volcano}

    @staticmethod
    def _check_keys(
        section: str, values: Optional[Dict[str, Any]], defaults: Dict[str, Any]
    ) -> None:
        """Reject keys a section does not define"""
        if not values:
            return
        if not isinstance(values, dict):
            raise ConfigError(f"Section '{section}' must be a mapping")
        unknown = sorted(set(values) - set(defaults))
        if unknown:
            raise ConfigError(f"Unknown keys in section '{section}': {unknown}")

    def _get_default_input(self) -> Dict[str, Any]:
        """Default ingestion configuration"""
        return {
            "sep": ",",
            "treatment_column": "Treatment",
            "sequencing_column": "Sequencing",
            "reference_level": "untreated",
            "treated_level": "treated",
        }

    def _get_default_differential(self) -> Dict[str, Any]:
        """Default differential expression configuration"""
        return {
            "min_count": 10,
            "fdr_threshold": 0.05,
            "logfc_threshold": 1.0,
            "top_n": 10,
            "refit_cooks": True,
            "shrink_lfc": True,
            "vst": True,
            "output_prefix": "pasilla",
        }

    def _get_default_visualization(self) -> Dict[str, Any]:
        """Default display configuration for rendered charts"""
        return {
            "dpi": 300,
            "save_formats": ["png"],
            "style": "seaborn-v0_8-whitegrid",
            "context": "notebook",
            "figsize": [8, 6],
            "heatmap_cmap": "viridis",
            "zscore_cmap": "RdBu_r",
            "distance_cmap": "Blues_r",
            "pca_top_genes": 500,
            "n_jobs": 1,
            "volcano": {
                "padj_threshold": 0.05,
                "logfc_threshold": 1.0,
                "label_top": 10,
            },
        }

    def resolve_input(self, path: Union[str, Path]) -> Path:
        """Resolve an input path relative to ``input_dir``"""
        path = Path(path)
        if not path.is_absolute() and self.input_dir:
            return Path(self.input_dir) / path
        return path

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def load_config(config_file: Union[str, Path]) -> Config:
    """Load configuration from YAML or JSON file"""
    config_path = Path(config_file)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        suffix = config_path.suffix.lower()
        try:
            if suffix in [".yaml", ".yml"]:
                config_dict = yaml.safe_load(f)
            elif suffix == ".json":
                config_dict = json.load(f)
            else:
                raise ConfigError(f"Unsupported config file format: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise ConfigError(f"Top level of {config_path} must be a mapping")

    try:
        return Config(**config_dict)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def save_config(config: Config, output_file: Union[str, Path]) -> None:
    """Save configuration to YAML file"""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, indent=2)

    logger.info(f"Configuration saved to {output_path}")


def validate_config(config: Config) -> List[str]:
    """Validate configuration and return list of issues"""
    issues = []

    if config.input_dir and not Path(config.input_dir).exists():
        issues.append(f"Input directory does not exist: {config.input_dir}")

    if config.n_threads <= 0:
        issues.append("Number of threads must be positive")

    diff = config.differential
    if not 0 < diff["fdr_threshold"] < 1:
        issues.append("fdr_threshold must be between 0 and 1")
    if diff["logfc_threshold"] < 0:
        issues.append("logfc_threshold must be non-negative")
    if diff["min_count"] < 0:
        issues.append("min_count must be non-negative")
    if int(diff["top_n"]) <= 0:
        issues.append("top_n must be positive")

    if config.input["reference_level"] == config.input["treated_level"]:
        issues.append("reference_level and treated_level must differ")

    vis = config.visualization
    unknown_formats = set(vis["save_formats"]) - {"png", "pdf", "svg"}
    if unknown_formats:
        issues.append(f"Unsupported figure formats: {sorted(unknown_formats)}")

    volcano = vis["volcano"]
    if (
        volcano["logfc_threshold"] != diff["logfc_threshold"]
        or volcano["padj_threshold"] != diff["fdr_threshold"]
    ):
        issues.append(
            "Volcano labelling thresholds differ from the significance filter "
            f"(volcano |log2FC| > {volcano['logfc_threshold']}, "
            f"padj < {volcano['padj_threshold']}; filter |log2FC| > "
            f"{diff['logfc_threshold']}, padj < {diff['fdr_threshold']})"
        )

    return issues


def get_default_config() -> Config:
    """Get default configuration object"""
    return Config()
