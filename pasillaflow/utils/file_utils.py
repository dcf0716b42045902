"""
File helpers for PasillaFlow outputs
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Union

from ..exceptions import ExportError

logger = logging.getLogger(__name__)


def create_output_directory(path: Union[str, Path]) -> Path:
    """Create an output directory, raising ExportError if it cannot be made"""
    output_dir = Path(path)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportError(f"Cannot create output directory {output_dir}: {e}") from e

    if not output_dir.is_dir():
        raise ExportError(f"Output path is not a directory: {output_dir}")

    return output_dir


@contextmanager
def safe_file_operation(path: Union[str, Path], action: str = "write"):
    """Translate filesystem failures on ``path`` into ExportError"""
    try:
        yield Path(path)
    except OSError as e:
        raise ExportError(f"Failed to {action} {path}: {e}") from e

