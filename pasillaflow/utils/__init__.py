"""
Utility functions and classes for PasillaFlow
"""

from .file_utils import create_output_directory, safe_file_operation
from .logging import get_logger, log_execution_time, setup_logging
from .validation import (
    validate_environment,
    validate_file_exists,
    validate_input_files,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_execution_time",
    "validate_file_exists",
    "validate_environment",
    "validate_input_files",
    "create_output_directory",
    "safe_file_operation",
]
