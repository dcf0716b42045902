"""
PasillaFlow: differential expression analysis of the Pasilla RNA-seq study

PasillaFlow fits a negative binomial model of treated vs untreated
Drosophila samples (pasilla knock-down), accounting for single-end vs
paired-end sequencing, and produces ranked result tables and the usual
diagnostic and result charts.

Main Components:
- Count matrix and sample design ingestion
- Low-count filtering and model fitting with pyDESeq2
- Ranking, significance filtering and export of results
- Dispersion, PCA, heatmap, MA and volcano charts

Example:
    >>> from pasillaflow import PasillaFlowAnalysis
    >>> analysis = PasillaFlowAnalysis("config.yaml")
    >>> results = analysis.run_full_pipeline()
"""

import logging
import sys
from importlib import metadata
from typing import Any, Dict

try:
    __version__ = metadata.version("pasillaflow")
except metadata.PackageNotFoundError:
    __version__ = "0.1.0-dev"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from . import data, differential, utils, visualization  # noqa: E402
from .config import Config, load_config  # noqa: E402
from .core import PasillaFlowAnalysis  # noqa: E402
from .exceptions import (  # noqa: E402
    ConfigError,
    ExportError,
    FitError,
    PasillaFlowError,
    SchemaError,
)
from .utils import setup_logging, validate_environment  # noqa: E402
from .utils.validation import validate_python_packages  # noqa: E402

__all__ = [
    "__version__",
    "PasillaFlowAnalysis",
    "Config",
    "load_config",
    "setup_logging",
    "validate_environment",
    "PasillaFlowError",
    "SchemaError",
    "FitError",
    "ExportError",
    "ConfigError",
    "data",
    "differential",
    "visualization",
    "utils",
]

DEPENDENCIES = [
    "numpy",
    "pandas",
    "scipy",
    "matplotlib",
    "seaborn",
    "sklearn",
    "pydeseq2",
    "adjustText",
    "yaml",
    "click",
    "colorlog",
    "joblib",
]


def get_info() -> Dict[str, Any]:
    """Get package information."""
    return {
        "name": "PasillaFlow",
        "version": __version__,
        "description": "Differential expression analysis of the Pasilla RNA-seq study",
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "modules": ["data", "differential", "visualization", "utils"],
    }


def check_dependencies() -> Dict[str, bool]:
    """Check if key dependencies are available."""
    return validate_python_packages(DEPENDENCIES)
